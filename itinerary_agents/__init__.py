"""
Itinerary generation agents.

A research-and-synthesis pipeline that turns a free-text travel or
corporate-event request into a costed, multi-day itinerary:

    parse -> suggest -> search -> extract -> summarize -> plan -> finalize

The stages are sequenced by the workflow controller in
``itinerary_agents.workflow``.
"""
