from __future__ import annotations

from typing import Any, Dict

from ..models.request import DonationRequestPayload


def request_document(payload: DonationRequestPayload) -> Dict[str, Any]:
    """Body for ``/create-donation-request`` in the remote API's camelCase."""
    return payload.model_dump(mode="json", by_alias=True)
