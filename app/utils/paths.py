"""Helpers for reading and writing nested values through dot-separated paths."""

from typing import Any, Mapping

_MISSING = object()


def split_path(path):
    """Split a dot-separated path into its segments.

    Args:
        path (str | list): A path such as "config.notice.content.popup" or an
            already split list of segments.

    Returns:
        list: The path segments.
    """
    if isinstance(path, (list, tuple)):
        return list(path)
    if not path:
        return []
    return path.split(".")


def get_path(tree: Any, path, default: Any = None) -> Any:
    """Get a nested value from dicts and lists using a dot-separated path.

    List items are addressed by their integer index. Missing segments, `None`
    values along the way and non-container values all return `default`.

        Examples:

        get_path({"a": {"b": [{"c": 1}]}}, "a.b.0.c")
        Output: 1

        get_path({"a": None}, "a.b", "fallback")
        Output: "fallback"
    """
    current = tree
    for segment in split_path(path):
        if isinstance(current, Mapping):
            current = current.get(segment, _MISSING)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else _MISSING
        else:
            return default
        if current is _MISSING:
            return default
    return current


def has_path(tree: Any, path) -> bool:
    """Check whether a nested value exists at the given path."""
    return get_path(tree, path, _MISSING) is not _MISSING


def set_path(tree: dict, path, value: Any) -> dict:
    """Set a nested value, creating intermediate dicts as needed.

    Existing non-dict values along the path are replaced by dicts, list items
    are addressed by their integer index.

    Args:
        tree (dict): The tree to mutate.
        path (str | list): Dot-separated path of the value.
        value: The value to set.

    Returns:
        dict: The mutated tree.
    """
    segments = split_path(path)
    if not segments:
        raise ValueError("Cannot set a value at an empty path")

    current = tree
    for segment in segments[:-1]:
        if isinstance(current, list) and segment.isdigit():
            current = current[int(segment)]
            continue
        child = current.get(segment)
        if not isinstance(child, (dict, list)):
            child = {}
            current[segment] = child
        current = child

    last = segments[-1]
    if isinstance(current, list) and last.isdigit():
        current[int(last)] = value
    else:
        current[last] = value
    return tree
