"""QR payloads printed at each study location."""

QR_PREFIX = 'studyspaces-gent-'


def generate_qr_code(location_id: str) -> str:
    """Return the QR payload for a location."""
    return f'{QR_PREFIX}{location_id}'


def validate_qr_code(code: str) -> str | None:
    """Return the location id encoded in ``code``, or None if it is not ours."""
    if not code.startswith(QR_PREFIX):
        return None
    return code[len(QR_PREFIX) :] or None
