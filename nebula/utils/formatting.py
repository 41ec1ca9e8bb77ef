import math

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def format_bytes(bytes_value: int, decimals: int = 2):
    if not bytes_value:
        return "0 Bytes"

    decimals = max(decimals, 0)
    i = min(int(math.floor(math.log(bytes_value, 1024))), len(SIZE_UNITS) - 1)

    # float log can land just under a unit boundary
    if i + 1 < len(SIZE_UNITS) and bytes_value >= 1024 ** (i + 1):
        i += 1
    elif i > 0 and bytes_value < 1024**i:
        i -= 1

    size = f"{bytes_value / (1024**i):.{decimals}f}"
    if "." in size:
        size = size.rstrip("0").rstrip(".")

    return f"{size} {SIZE_UNITS[i]}"


def format_details(candidate):
    details = []

    if candidate.size is not None:
        details.append(f"💾 {format_bytes(candidate.size)}")

    details.append(f"👤 {candidate.seeders}")
    details.append(f"📺 {candidate.resolution or 'Unknown'}")

    if candidate.video_codec:
        details.append(f"🎬 {candidate.video_codec}")
    if candidate.video_source:
        details.append(f"💿 {candidate.video_source}")
    if candidate.languages:
        details.append(f"🗣️ {', '.join(candidate.languages)}")

    return " | ".join(details)


def format_title(heading: str, details: str):
    return f"{heading}\n{details}"
