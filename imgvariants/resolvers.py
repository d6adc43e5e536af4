"""
Width and format resolution shared by prediction and generation.
"""

from typing import List, Optional, Sequence, Union


def get_formats(formats: Union[str, Sequence[Optional[str]], None]) -> List[Optional[str]]:
    """
    Resolve the ordered list of output formats.

    A comma-separated string is split. Any 'svg' entry is moved to the front
    so the planner can short-circuit on it; other entries keep their order.

    Args:
        formats: Sequence of format tags (None = source format) or a string

    Returns:
        New list of formats, empty when nothing was requested
    """
    if not formats:
        return []
    if isinstance(formats, str):
        formats = formats.split(',')
    # sorted() is stable
    return sorted(formats, key=lambda fmt: 0 if fmt == 'svg' else 1)


def get_widths(
    original_width: int,
    widths: Optional[Sequence[Optional[int]]] = None,
    allow_upscale: bool = False
) -> List[int]:
    """
    Resolve the ascending list of output widths.

    None entries become the original width. Widths above the original are
    dropped unless upscaling is allowed; if that drops every requested width
    the original width is used instead. Duplicates are preserved.

    Args:
        original_width: Intrinsic width of the source
        widths: Requested widths
        allow_upscale: Keep widths larger than the original

    Returns:
        Sorted list of widths
    """
    valid = [width or original_width for width in (widths or [])]
    filtered = [width for width in valid if allow_upscale or width <= original_width]
    if valid and not filtered:
        filtered.append(original_width)
    return sorted(filtered)
