STANDARD_LOG_LEVELS = {
    "DEBUG": {"color": "#DC5F00", "icon": "🕸️", "loguru_color": "<fg #DC5F00>"},
    "INFO": {"color": "#FC5F39", "icon": "📰", "loguru_color": "<fg #FC5F39>"},
    "WARNING": {"color": "#DC5F00", "icon": "⚠️", "loguru_color": "<fg #DC5F00>"},
    "ERROR": {"color": "#ff0000", "icon": "❌", "loguru_color": "<fg #ff0000>"},
    "CRITICAL": {"color": "#ff0000", "icon": "💀", "loguru_color": "<fg #ff0000>"},
}

CUSTOM_LOG_LEVELS = {
    "NEBULA": {
        "color": "#7871d6",
        "icon": "🌌",
        "loguru_color": "<fg #7871d6>",
        "no": 50,
    },
    "API": {"color": "#006989", "icon": "👾", "loguru_color": "<fg #006989>", "no": 45},
    "SCRAPER": {
        "color": "#d6bb71",
        "icon": "👻",
        "loguru_color": "<fg #d6bb71>",
        "no": 40,
    },
    "DEBRID": {
        "color": "#DC5F00",
        "icon": "⚡",
        "loguru_color": "<fg #DC5F00>",
        "no": 38,
    },
    "STREAM": {
        "color": "#d171d6",
        "icon": "🎬",
        "loguru_color": "<fg #d171d6>",
        "no": 35,
    },
    "DATABASE": {
        "color": "#5aa5d9",
        "icon": "💾",
        "loguru_color": "<fg #5aa5d9>",
        "no": 32,
    },
    "TRACKERS": {
        "color": "#5fba64",
        "icon": "📡",
        "loguru_color": "<fg #5fba64>",
        "no": 25,
    },
}
