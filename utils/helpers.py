from typing import List, Optional, Sequence

from config import BATTLE_LOG_CHUNK_SIZE, EMBED_DESCRIPTION_LIMIT, STAT_ALIASES, STAT_NAMES


def format_duration(seconds: float) -> str:
    """
    Format a number of seconds as readable text.

    Args:
        seconds: The duration in seconds

    Returns:
        str: e.g. "4 minutes and 10 seconds"
    """
    minutes, seconds = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)

    if hours > 0:
        return f"{hours} hours, {minutes} minutes and {seconds} seconds"
    if minutes > 0:
        return f"{minutes} minutes and {seconds} seconds"
    return f"{seconds} seconds"


def chunk_battle_log(battle_log: Sequence[str], chunk_size: int = BATTLE_LOG_CHUNK_SIZE) -> List[str]:
    """
    Split a battle log into message-sized chunks.

    Lines are kept whole unless a single line is longer than a chunk.

    Args:
        battle_log: Ordered log lines
        chunk_size: Maximum characters per chunk

    Returns:
        List[str]: The chunks, in order
    """
    chunks = []
    current = ""

    for line in battle_log:
        while len(line) > chunk_size:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:chunk_size])
            line = line[chunk_size:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > chunk_size:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)

    return chunks


def tail_battle_log(battle_log: Sequence[str], limit: int = EMBED_DESCRIPTION_LIMIT) -> str:
    """Join the most recent log lines that fit within limit characters."""
    lines = []
    length = 0

    for line in reversed(battle_log):
        added = len(line) + (1 if lines else 0)
        if length + added > limit:
            break
        lines.append(line)
        length += added

    return "\n".join(reversed(lines))


def resolve_stat_name(stat_input: str) -> Optional[str]:
    """Map a stat name or abbreviation (str, dex, ...) to its full name, or None."""
    stat = stat_input.strip().lower()
    stat = STAT_ALIASES.get(stat, stat)
    return stat if stat in STAT_NAMES else None
