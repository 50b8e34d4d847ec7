"""Shipping address book endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from ..models import Address, AddressForm
from .client import ApiClient, ApiError

logger = logging.getLogger(__name__)


class AddressService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list(self) -> list[Address]:
        data = await self.client.get("/api/addresses")
        return [Address.model_validate(a) for a in data.get("addresses", [])]

    async def get(self, address_id: int) -> Address:
        data = await self.client.get(f"/api/addresses/{address_id}")
        return Address.model_validate(data["address"])

    async def default(self) -> Optional[Address]:
        """The default address, or None if there is none or the call fails."""
        try:
            data = await self.client.get("/api/addresses/default")
        except ApiError as e:
            logger.debug(f"No default address: {e}")
            return None
        address = data.get("address")
        return Address.model_validate(address) if address else None

    async def create(self, form: AddressForm) -> Address:
        data = await self.client.post(
            "/api/addresses", json=form.model_dump(mode="json", exclude_none=True)
        )
        return Address.model_validate(data["address"])

    async def update(self, address_id: int, form: AddressForm) -> Address:
        data = await self.client.put(
            f"/api/addresses/{address_id}", json=form.model_dump(mode="json", exclude_none=True)
        )
        return Address.model_validate(data["address"])

    async def delete(self, address_id: int) -> None:
        await self.client.delete(f"/api/addresses/{address_id}")

    async def set_default(self, address_id: int) -> Address:
        data = await self.client.put(f"/api/addresses/{address_id}/default", json={})
        return Address.model_validate(data["address"])
