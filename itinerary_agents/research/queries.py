"""
Query planning.

Builds the ordered list of discovery queries for a request. Corporate and
travel requests use different templates; a few queries are conditional on
group size, focus or preferences.
"""

from typing import List

from itinerary_agents.shared.contracts import ParsedRequest, Priority, SearchQuery

H, M, L = Priority.HIGH, Priority.MEDIUM, Priority.LOW

# preference keywords -> (query template, description template, category, max results)
PREFERENCE_QUERIES = (
    (
        ("adventure", "outdoor"),
        'adventure activities "{loc}" outdoor sports trekking water sports',
        "Adventure activities in {loc}",
        "adventure",
        8,
    ),
    (
        ("cultural", "heritage"),
        'cultural attractions "{loc}" heritage sites museums temples historical',
        "Cultural and heritage sites in {loc}",
        "cultural",
        8,
    ),
    (
        ("food", "culinary"),
        'food tours "{loc}" culinary experiences local cuisine restaurants',
        "Culinary experiences in {loc}",
        "dining",
        7,
    ),
)


def _q(query: str, description: str, category: str, priority: Priority, max_results: int):
    return SearchQuery(
        query=query,
        description=description,
        category=category,
        priority=priority,
        max_results=max_results,
    )


def build_corporate_queries(request: ParsedRequest) -> List[SearchQuery]:
    loc = request.location
    n = request.participants
    event = request.event_type.value or "corporate event"

    queries = [
        _q(
            f'"{event}" venues "{loc}" conference halls meeting rooms capacity {n}',
            f"Corporate venues for {event} in {loc}",
            "venues", H, 8,
        ),
        _q(
            f'business hotels "{loc}" group booking {n} conference facilities',
            f"Business hotels with meeting facilities in {loc}",
            "accommodation", H, 6,
        ),
    ]

    if "team" in request.focus.lower():
        queries.append(
            _q(
                f'team building activities "{loc}" corporate groups {n} people indoor outdoor',
                f"Team building activities in {loc}",
                "activities", H, 8,
            )
        )
        queries.append(
            _q(
                f'adventure team building "{loc}" corporate retreat activities',
                f"Adventure team building in {loc}",
                "activities", M, 6,
            )
        )

    queries.append(
        _q(
            f'corporate catering "{loc}" business lunch group dining {n}',
            f"Corporate catering and group dining in {loc}",
            "catering", H, 7,
        )
    )
    queries.append(
        _q(
            f'banquet halls "{loc}" corporate events group dining capacity {n}',
            f"Banquet facilities for corporate groups in {loc}",
            "catering", M, 5,
        )
    )

    if n > 15:
        queries.append(
            _q(
                f'group transportation "{loc}" bus rental corporate travel {n} passengers',
                f"Group transportation options in {loc}",
                "transport", M, 5,
            )
        )

    queries.extend(
        [
            _q(
                f'corporate event planners "{loc}" {event} planning services',
                f"Professional event planning services in {loc}",
                "services", M, 4,
            ),
            _q(
                f'corporate group visits "{loc}" attractions museums cultural sites',
                f"Corporate-friendly attractions in {loc}",
                "attractions", M, 6,
            ),
            _q(
                f'meeting room rental "{loc}" AV equipment projector capacity {n}',
                f"Meeting room rentals with facilities in {loc}",
                "venues", H, 6,
            ),
        ]
    )
    return queries


def build_travel_queries(request: ParsedRequest) -> List[SearchQuery]:
    loc = request.location
    n = request.participants

    queries = [
        _q(
            f'"{loc}" top attractions must visit places tourist guide',
            f"Top tourist attractions in {loc}",
            "attractions", H, 10,
        ),
        _q(
            f'"{loc}" hidden gems off beaten path local attractions',
            f"Hidden gems and local attractions in {loc}",
            "attractions", M, 6,
        ),
    ]

    if n > 4:
        queries.append(
            _q(
                f'group accommodation "{loc}" hotels {n} people multiple rooms',
                f"Group accommodation in {loc}",
                "accommodation", H, 7,
            )
        )
    else:
        queries.append(
            _q(
                f'best hotels "{loc}" accommodation booking tourist',
                f"Quality accommodation in {loc}",
                "accommodation", H, 7,
            )
        )

    # One query per matched theme, however many preferences hit it
    for keywords, query, description, category, max_results in PREFERENCE_QUERIES:
        if any(
            keyword in pref.lower()
            for pref in request.preferences
            for keyword in keywords
        ):
            queries.append(
                _q(
                    query.format(loc=loc),
                    description.format(loc=loc),
                    category, H, max_results,
                )
            )

    queries.extend(
        [
            _q(
                f'best restaurants "{loc}" local cuisine dining recommendations',
                f"Restaurant recommendations in {loc}",
                "dining", H, 8,
            ),
            _q(
                f'street food "{loc}" local markets food stalls authentic cuisine',
                f"Street food and local markets in {loc}",
                "dining", M, 6,
            ),
            _q(
                f'transportation "{loc}" local transport taxi bus metro airport transfer',
                f"Transportation options in {loc}",
                "transport", M, 5,
            ),
            _q(
                f'shopping "{loc}" markets malls handicrafts souvenirs local crafts',
                f"Shopping options in {loc}",
                "shopping", L, 5,
            ),
            _q(
                f'nightlife "{loc}" entertainment bars clubs live music',
                f"Nightlife and entertainment in {loc}",
                "entertainment", L, 4,
            ),
            _q(
                f'"{loc}" travel guide tips weather best time visit practical information',
                f"Travel tips and practical information for {loc}",
                "practical", M, 4,
            ),
            _q(
                f'day trips from "{loc}" nearby attractions excursions tours',
                f"Day trip options from {loc}",
                "excursions", M, 6,
            ),
        ]
    )
    return queries


def build_queries(request: ParsedRequest) -> List[SearchQuery]:
    """Plan the ordered discovery queries for a request."""
    if request.is_corporate:
        return build_corporate_queries(request)
    return build_travel_queries(request)
