"""
Domain models package.

This package contains the feature, vocabulary and drawing event models.
"""

from agritagger.domain.events import CreateEvent, DeleteEvent, DrawingEvent, EditEvent
from agritagger.domain.features import (
    ATTRIBUTE_NAMES,
    EditorState,
    Feature,
    Vocabulary,
    geometry_kind,
    geometry_problem,
    is_hex_color,
    utc_timestamp,
)

__all__ = [
    'ATTRIBUTE_NAMES',
    'CreateEvent',
    'DeleteEvent',
    'DrawingEvent',
    'EditEvent',
    'EditorState',
    'Feature',
    'Vocabulary',
    'geometry_kind',
    'geometry_problem',
    'is_hex_color',
    'utc_timestamp',
]
