"""
Remote Publisher
All write operations against the destination platform: staged media
upload, product creation, variant creation and location lookup.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests
from PIL import UnidentifiedImageError

from ..config import Settings, get_settings
from ..models.product import ScrapedProduct, ScrapedVariant
from .client import GraphQLClient
from .errors import DownloadFailed, LocationUnavailable, ProductCreateFailed, StagedUploadFailed
from .media import JPEG_MIME_TYPE, UPLOAD_FILENAME, reencode_image

logger = logging.getLogger(__name__)


STAGED_UPLOADS_CREATE = """
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters { name value }
    }
    userErrors { field message }
  }
}
"""

PRODUCT_CREATE = """
mutation productCreate($product: ProductCreateInput!, $media: [CreateMediaInput!]) {
  productCreate(product: $product, media: $media) {
    product {
      id
      title
    }
    userErrors { field message }
  }
}
"""

PRODUCT_VARIANTS_BULK_CREATE = """
mutation productVariantsBulkCreate(
  $productId: ID!,
  $variants: [ProductVariantsBulkInput!]!,
  $strategy: ProductVariantsBulkCreateStrategy
) {
  productVariantsBulkCreate(productId: $productId, variants: $variants, strategy: $strategy) {
    productVariants { id title }
    userErrors { field message }
  }
}
"""

PRIMARY_LOCATION = """
query primaryLocation {
  locations(first: 1) {
    edges { node { id } }
  }
}
"""


def _first_user_error(payload: Dict[str, Any], field: str) -> Optional[str]:
    """Return the first userErrors message under data.<field>, if any."""
    section = (payload.get("data") or {}).get(field) or {}
    errors = section.get("userErrors") or []
    if errors:
        return errors[0].get("message") or "Unknown error"
    return None


def build_product_input(product: ScrapedProduct) -> Dict[str, Any]:
    """Product fields for productCreate; options only when they are not the default."""
    product_input: Dict[str, Any] = {
        "title": product.title,
        "descriptionHtml": product.description_html,
        "vendor": product.vendor,
    }
    if product.has_real_options:
        product_input["productOptions"] = [
            {"name": option.name, "values": [{"name": value} for value in option.values]}
            for option in product.options
        ]
    return product_input


def build_media_input(product: ScrapedProduct, media_handles: Sequence[str]) -> List[Dict[str, Any]]:
    return [
        {"alt": product.title, "mediaContentType": "IMAGE", "originalSource": handle}
        for handle in media_handles
    ]


def build_variant_input(
    variants: Sequence[ScrapedVariant],
    location_id: str,
    option_names: Sequence[str] = (),
) -> List[Dict[str, Any]]:
    """
    Variant rows for productVariantsBulkCreate.

    Price, SKU and inventory are copied exactly; empty option slots are skipped.
    """
    rows = []
    for variant in variants:
        option_values = []
        for slot, value in enumerate(variant.selected_options):
            if not value:
                continue
            option_value = {"name": value}
            if slot < len(option_names):
                option_value["optionName"] = option_names[slot]
            option_values.append(option_value)

        rows.append(
            {
                "price": variant.price,
                "sku": variant.sku,
                "optionValues": option_values,
                "inventoryQuantities": [
                    {"availableQuantity": variant.inventory_quantity, "locationId": location_id}
                ],
            }
        )
    return rows


class RemotePublisher:
    """
    Writes products into one destination shop.

    Usage:
        publisher = RemotePublisher(GraphQLClient(shop, token))
        location_id = publisher.get_primary_location()
        product_id = publisher.create_product(product, handles, location_id)
    """

    def __init__(
        self,
        client: GraphQLClient,
        http: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the publisher.

        Args:
            client: GraphQL client for the destination shop
            http: Session for image downloads and staged uploads (separate from
                the API session so the admin token is never sent to third parties)
            settings: Application settings
        """
        self.client = client
        self.http = http or requests.Session()
        self.settings = settings or get_settings()

    def call(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.client.call(query, variables)

    def _download(self, image_url: str) -> bytes:
        try:
            response = self.http.get(image_url, timeout=self.settings.image_download_timeout)
        except requests.RequestException as e:
            raise DownloadFailed(details={"url": image_url, "error": str(e)})
        if not response.ok:
            raise DownloadFailed(
                f"Failed to download image: HTTP {response.status_code}",
                details={"url": image_url, "status_code": response.status_code},
            )
        return response.content

    def upload_media(self, image_url: str) -> str:
        """
        Download, re-encode and stage one image.

        Args:
            image_url: Source image URL

        Returns:
            Resource URL of the staged upload, usable as a media source

        Raises:
            DownloadFailed: If the image cannot be fetched or decoded
            StagedUploadFailed: If the staging request or the binary upload fails
        """
        source = self._download(image_url)
        try:
            encoded = reencode_image(
                source,
                max_dimension=self.settings.image_max_dimension,
                quality=self.settings.image_jpeg_quality,
            )
        except (UnidentifiedImageError, OSError) as e:
            raise DownloadFailed(
                "The image could not be read.", details={"url": image_url, "error": str(e)}
            )

        file_size = str(len(encoded))
        payload = self.client.call(
            STAGED_UPLOADS_CREATE,
            {
                "input": [
                    {
                        "filename": UPLOAD_FILENAME,
                        "mimeType": JPEG_MIME_TYPE,
                        "fileSize": file_size,
                        "resource": "PRODUCT_IMAGE",
                        "httpMethod": "PUT",
                    }
                ]
            },
        )

        user_error = _first_user_error(payload, "stagedUploadsCreate")
        if user_error:
            raise StagedUploadFailed(user_error)

        targets = ((payload.get("data") or {}).get("stagedUploadsCreate") or {}).get(
            "stagedTargets"
        ) or []
        if not targets or not targets[0].get("url") or not targets[0].get("resourceUrl"):
            raise StagedUploadFailed(details={"errors": payload.get("errors")})
        target = targets[0]

        # Staged targets require PUT, not POST
        try:
            upload = self.http.put(
                target["url"],
                data=encoded,
                headers={"Content-Type": JPEG_MIME_TYPE, "Content-Length": file_size},
                timeout=self.settings.image_download_timeout,
            )
        except requests.RequestException as e:
            raise StagedUploadFailed(details={"error": str(e)})
        if not upload.ok:
            raise StagedUploadFailed(
                f"Staged upload failed: HTTP {upload.status_code}",
                details={"status_code": upload.status_code},
            )

        return target["resourceUrl"]

    def create_product(
        self, product: ScrapedProduct, media_handles: Sequence[str], location_id: str
    ) -> str:
        """
        Create the product with its options and media in one request.

        Returns:
            Remote product id

        Raises:
            ProductCreateFailed: With the first user error reported by the API
        """
        payload = self.client.call(
            PRODUCT_CREATE,
            {
                "product": build_product_input(product),
                "media": build_media_input(product, media_handles),
            },
        )

        user_error = _first_user_error(payload, "productCreate")
        if user_error:
            raise ProductCreateFailed(user_error)

        created = ((payload.get("data") or {}).get("productCreate") or {}).get("product") or {}
        if not created.get("id"):
            logger.error(f"productCreate returned no product: {payload.get('errors')}")
            raise ProductCreateFailed(details={"errors": payload.get("errors")})

        logger.info(
            f"Created product {created['id']} ({len(media_handles)} media)",
            extra={"shop": self.client.shop, "location_id": location_id},
        )
        return created["id"]

    def create_variants(
        self,
        product_id: str,
        variants: Sequence[ScrapedVariant],
        location_id: str,
        option_names: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        """
        Bulk-create the product's variants with initial inventory.

        Variant errors are logged and returned, never raised: a product
        with some missing variants is kept.

        Returns:
            The user errors reported by the API (empty on full success)
        """
        if not variants:
            return []

        payload = self.client.call(
            PRODUCT_VARIANTS_BULK_CREATE,
            {
                "productId": product_id,
                "variants": build_variant_input(variants, location_id, option_names),
                "strategy": "REMOVE_STANDALONE_VARIANT",
            },
        )

        section = (payload.get("data") or {}).get("productVariantsBulkCreate") or {}
        user_errors = section.get("userErrors") or []
        if user_errors:
            logger.error(
                f"Variant errors for {product_id}: {user_errors}",
                extra={"shop": self.client.shop, "product_id": product_id},
            )
        elif payload.get("errors"):
            logger.error(f"Variant creation failed for {product_id}: {payload['errors']}")
            user_errors = [{"field": None, "message": "Variant creation failed"}]
        return user_errors

    def get_primary_location(self) -> str:
        """
        Id of the shop's first inventory location.

        Raises:
            LocationUnavailable: If the shop has no locations
        """
        payload = self.client.call(PRIMARY_LOCATION, {})
        edges = (((payload.get("data") or {}).get("locations") or {}).get("edges")) or []
        if not edges or not (edges[0].get("node") or {}).get("id"):
            raise LocationUnavailable(details={"errors": payload.get("errors")})
        return edges[0]["node"]["id"]

    def close(self) -> None:
        """Release both HTTP sessions."""
        self.client.close()
        self.http.close()
