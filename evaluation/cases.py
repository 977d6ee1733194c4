# (class, method, parameters) available to the offline retriever
EVAL_METHODS = [
    ("HomeScreen", "openShowFromBrandFeedSection", ["TestData data", "Item item"]),
    ("HomeScreen", "waitForHomeScreen", []),
    ("ContainerScreen", "selectEpisode", ["Item item", "int episodeIndex", "int seasonIndex"]),
    ("PlayerScreen", "waitForVideoLoaded", []),
    ("PlayerScreen", "isProgressBarDisplayed", []),
    ("PlayerScreen", "pauseVideo", []),
    ("PlayerScreen", "seekForwardToPosition", ["int seconds"]),
    ("PlayerScreen", "restartPlayback", []),
    ("SearchScreen", "searchFor", ["String query"]),
    ("LoginScreen", "login", ["User user"]),
]

# Atomic actions seeded into the knowledge store before each run
EVAL_ATOMIC_ACTIONS = [
    {
        "id": "eval_pause_video",
        "action_name": "pause_video",
        "method_name": "pauseVideo",
        "class_name": "PlayerScreen",
        "target_screen": "player",
        "keywords": ["pause", "video", "player"],
    },
    {
        "id": "eval_search_for",
        "action_name": "search_for",
        "method_name": "searchFor",
        "class_name": "SearchScreen",
        "target_screen": "search",
        "keywords": ["search", "find", "query"],
    },
]

EVAL_CASES = [
    {
        "id": "play_episode",
        "platform": "ctv",
        "steps": [
            {"action": "play", "target": "episode"},
            {"action": "verify", "target": "progress bar"},
        ],
        "expected": ["openShowFromBrandFeedSection", "isProgressBarDisplayed"],
    },
    {
        "id": "pause_playback",
        "platform": "ctv",
        "steps": [
            {"action": "pause", "target": "video"},
        ],
        "expected": ["pauseVideo"],
    },
    {
        "id": "search_content",
        "platform": "web",
        "steps": [
            {"action": "search", "target": "query", "details": "The Office"},
        ],
        "expected": ["searchFor"],
    },
    {
        "id": "unknown_feature",
        "platform": "ctv",
        "steps": [
            {"action": "toggle", "target": "picture in picture"},
        ],
        "expected": [None],
    },
]
