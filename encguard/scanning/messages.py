"""User-facing notices. Diagnostic messages live on ScanResult instead."""

MIMETYPE_MISMATCH = "File content mimetype did not match registered mimetype for extension."
ENCRYPTED_CONTENT_FOUND = "Encrypted file found. File content was unable to be inspected."
ENCRYPTED_CONTENT_MESSAGE = "{item} was unable to be inspected, due to encryption on the file."
SCAN_FAILED = "File could not be scanned for encryption and has been blocked."
CANNOT_RUN = "Encryption checks could not run for this file."


def encrypted_content_message(item: str) -> str:
    """Per-item message for the host's "virus found" notification."""
    return ENCRYPTED_CONTENT_MESSAGE.format(item=item)
