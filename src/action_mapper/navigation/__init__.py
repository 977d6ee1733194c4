"""
Navigation planning layer.

Key components:
- SCREEN_GRAPH: static screen adjacency, read-only after import
- CONTENT_PATTERNS: fixed CTV content/player macros
- NavigationPlanner: shortest path and prerequisite plan for a scenario
"""
from .screen_graph import ENTRY_SCREEN, SCREEN_CLASS_MAP, SCREEN_GRAPH, class_for_screen, is_known_screen
from .content_patterns import CONTENT_PATTERNS, ContentPattern, MacroStep, seek_seconds_for
from .plan import NavigationStep, PrerequisitePlan, SetupStep, TestDataRequirement
from .navigation_planner import (
    NavigationOptions,
    NavigationPlanner,
    build_navigation_steps,
    build_setup_sequence,
    collect_imports,
    identify_test_data_needs,
    infer_target_screen,
    mappings_require_playback,
    mappings_require_watch_progress,
    needs_content_navigation,
    shortest_path,
)

__all__ = [
    "ENTRY_SCREEN",
    "SCREEN_CLASS_MAP",
    "SCREEN_GRAPH",
    "class_for_screen",
    "is_known_screen",
    "CONTENT_PATTERNS",
    "ContentPattern",
    "MacroStep",
    "seek_seconds_for",
    "NavigationStep",
    "PrerequisitePlan",
    "SetupStep",
    "TestDataRequirement",
    "NavigationOptions",
    "NavigationPlanner",
    "build_navigation_steps",
    "build_setup_sequence",
    "collect_imports",
    "identify_test_data_needs",
    "infer_target_screen",
    "mappings_require_playback",
    "mappings_require_watch_progress",
    "needs_content_navigation",
    "shortest_path",
]
