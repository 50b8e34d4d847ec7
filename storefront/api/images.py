"""Image file upload and removal."""

from .client import ApiClient


class ImageService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def upload(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Upload an image file and return the URL the backend stored it under."""
        data = await self.client.post(
            "/api/upload-image", files={"image": (filename, content, content_type)}
        )
        return data["image_url"]

    async def delete(self, image_path: str) -> None:
        await self.client.delete("/api/delete-image", json={"image_path": image_path})
