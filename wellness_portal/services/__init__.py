"""Service layer for the wellness portal.

This package contains business logic that sits between the
Flask route handlers and the database models. Separating
services into their own modules keeps the routes thin and
makes the profile aggregation, population routing and packet
assembly easy to unit test.

Nothing in this package should perform any HTTP handling.
Instead, services return simple Python data structures or
database objects, and raise exceptions defined in
``wellness_portal.errors`` when something goes wrong.
"""

from .profile_service import (
    UnifiedProfile,
    completion_percentage,
    get_completed_modules,
    get_module_answers,
    get_profile_completion_percentage,
    get_progress,
    get_required_modules_for_user,
    get_unified_profile,
    has_completed_required_modules,
    mark_profile_complete,
    save_module_to_profile,
)
from .population_service import (
    all_populations,
    assign_population,
    classify_population,
    population_info,
)
from .packet_service import (
    create_draft_packet,
    generate_packet_content,
    packet_type_for_population,
    publish_packet,
)

__all__ = [
    "UnifiedProfile",
    "all_populations",
    "assign_population",
    "classify_population",
    "completion_percentage",
    "create_draft_packet",
    "generate_packet_content",
    "get_completed_modules",
    "get_module_answers",
    "get_profile_completion_percentage",
    "get_progress",
    "get_required_modules_for_user",
    "get_unified_profile",
    "has_completed_required_modules",
    "mark_profile_complete",
    "packet_type_for_population",
    "population_info",
    "publish_packet",
    "save_module_to_profile",
]
