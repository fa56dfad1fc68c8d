"""
Console output for the sketch

Every module does `from .console import print`, so status lines, hue-timer
steps, notes and microphone errors all honour --silent and --debug.
main() calls set_print_flags() right after parsing the command line.
"""

import builtins

_ORIG_PRINT = builtins.print
_GLOBAL_SILENT = False
_GLOBAL_DEBUG = False


def set_print_flags(silent, debug):
    global _GLOBAL_SILENT, _GLOBAL_DEBUG
    _GLOBAL_SILENT = bool(silent)
    _GLOBAL_DEBUG = bool(debug)


def print(*args, debug_only=False, force=False, **kwargs):
    """Print a sketch status line

    debug_only lines (frame stats, hue steps, notes) need --debug;
    force lines ignore --silent.
    """
    if _GLOBAL_SILENT and not force:
        return
    if debug_only and not _GLOBAL_DEBUG:
        return
    return _ORIG_PRINT(*args, **kwargs)
