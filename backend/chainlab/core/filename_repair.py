"""Filename Repair — undo latin-1 mojibake on uploaded filenames.

Multipart parsers often hand back UTF-8 filenames decoded as latin-1
("å¬å¸.txt" instead of "公司.txt"). Re-encoding as latin-1 and decoding as
UTF-8 restores them. The repair is accepted only if it decodes cleanly and
actually changes the name; anything else returns the input untouched.
"""

import logging

logger = logging.getLogger(__name__)


def repair_filename(filename: str | None) -> str | None:
    if not filename:
        return filename
    try:
        decoded = filename.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return filename
    if decoded == filename or "�" in decoded:
        return filename
    logger.debug("Repaired filename %r -> %r", filename, decoded)
    return decoded
