from fastapi import HTTPException


def parse_id(raw: str, label: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID") from None
