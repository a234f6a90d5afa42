"""
Catalog Scraper
Reads a storefront's public catalog endpoints and normalizes the results
into ScrapedProduct records.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import requests

from ..config import Settings, get_settings
from ..models.product import ProductOption, ScrapedProduct, ScrapedVariant
from .errors import (
    PRODUCT,
    STORE,
    EmptyCatalog,
    InvalidUrl,
    NotAStorefront,
    ScrapeError,
    Unreachable,
    classify_status,
)
from .payloads import RawProduct, validate_catalog_page, validate_product

logger = logging.getLogger(__name__)

PRODUCT_PATH_SEGMENT = "/products/"
DEFAULT_VENDOR = "Imported"
SKU_PREFIX = "IMP-"


def normalize_origin(url: str) -> str:
    """
    Reduce a storefront URL to its bare origin (scheme + host).

    A missing scheme defaults to https; path, query and port are dropped.

    Raises:
        InvalidUrl: If no host can be extracted
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidUrl("Please enter a store URL.")
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    if not parsed.hostname:
        raise InvalidUrl("This doesn't look like a valid URL. Please check it and try again.")
    return f"{parsed.scheme.lower()}://{parsed.hostname}"


def split_product_url(url: str) -> Tuple[str, str]:
    """
    Extract (origin, handle) from a product page URL.

    Raises:
        InvalidUrl: If the URL has no product-path segment or no handle
    """
    if not url or PRODUCT_PATH_SEGMENT not in url:
        raise InvalidUrl()

    origin = normalize_origin(url)
    handle = url.split(PRODUCT_PATH_SEGMENT, 1)[1]
    handle = handle.split("?", 1)[0].split("#", 1)[0].strip("/")
    if not handle:
        raise InvalidUrl()
    return origin, handle


def map_product(raw: RawProduct, origin: str) -> ScrapedProduct:
    """Map a validated remote product onto the canonical shape."""
    variants = []
    for v in raw.variants:
        variants.append(
            ScrapedVariant(
                title=v.title,
                price=v.price,
                sku=v.sku or f"{SKU_PREFIX}{v.id}",
                inventory_quantity=v.inventory_quantity or 0,
                # Only three positional slots exist on the destination platform
                selected_options=[v.option1, v.option2, v.option3],
            )
        )

    return ScrapedProduct(
        title=raw.title,
        description_html=raw.body_html or "",
        vendor=raw.vendor or DEFAULT_VENDOR,
        source_url=f"{origin}{PRODUCT_PATH_SEGMENT}{raw.handle}",
        images=[image.src for image in raw.images],
        options=[ProductOption(name=o.name, values=o.values) for o in raw.options],
        variants=variants,
    )


class CatalogScraper:
    """
    Fetches and normalizes public storefront catalogs.

    Every failure surfaces as a ScrapeError subclass with a user-facing
    message; transport exceptions never escape.

    Usage:
        scraper = CatalogScraper()
        products = scraper.fetch_store_catalog("https://example.myshopify.com")
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the scraper.

        Args:
            session: HTTP session (created if not provided)
            settings: Application settings
        """
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "User-Agent": self.settings.scraper_user_agent}
        )
        self.page_size = self.settings.scraper_page_size

    def _get(self, url: str, params: Optional[dict] = None, context: str = STORE):
        """GET a URL, classifying network failures and non-2xx statuses."""
        try:
            response = self.session.get(url, params=params, timeout=self.settings.scraper_timeout)
        except requests.RequestException as e:
            logger.warning(f"Network error fetching {url}: {e}")
            raise Unreachable()

        if not response.ok:
            raise classify_status(response.status_code, context)
        return response

    def fetch_store_catalog(self, store_url: str) -> List[ScrapedProduct]:
        """
        Fetch every product listed by a store, in remote order.

        Pages through the listing endpoint until a short or empty page.
        A failure on the first page is raised; a failure on a later page
        truncates the catalog to what was already read.

        Args:
            store_url: Any URL on the store (path and query are ignored)

        Returns:
            List of scraped products

        Raises:
            ScrapeError: Classified failure (EmptyCatalog if nothing was found)
        """
        origin = normalize_origin(store_url)
        listing_url = f"{origin}/products.json"
        products: List[ScrapedProduct] = []
        page = 1

        while True:
            try:
                response = self._get(
                    listing_url, params={"limit": self.page_size, "page": page}, context=STORE
                )
                result = validate_catalog_page(response.content)
                if not result.ok:
                    logger.info(f"Listing page {page} from {origin} has wrong shape: {result.reason}")
                    raise NotAStorefront()
            except ScrapeError as e:
                if page == 1:
                    raise
                logger.warning(
                    f"Stopping catalog scrape of {origin} at page {page}: {e.message}",
                    extra={"origin": origin, "page": page, "collected": len(products)},
                )
                break

            batch = result.value.products
            if not batch:
                break

            products.extend(map_product(raw, origin) for raw in batch)

            if len(batch) < self.page_size:
                break  # Last page
            page += 1

        if not products:
            raise EmptyCatalog()

        logger.info(f"Scraped {len(products)} products from {origin} ({page} page(s))")
        return products

    def fetch_single_product(self, product_url: str) -> ScrapedProduct:
        """
        Fetch one product by its page URL.

        Raises:
            InvalidUrl: If the URL has no /products/ segment
            ScrapeError: Any other classified failure
        """
        origin, handle = split_product_url(product_url)
        response = self._get(f"{origin}{PRODUCT_PATH_SEGMENT}{handle}.json", context=PRODUCT)

        result = validate_product(response.content)
        if not result.ok:
            logger.info(f"Product payload from {origin} has wrong shape: {result.reason}")
            raise NotAStorefront()

        return map_product(result.value.product, origin)

    def preview(self, url: str) -> List[ScrapedProduct]:
        """Product page URLs fetch one product; anything else fetches the whole store."""
        if PRODUCT_PATH_SEGMENT in (url or ""):
            return [self.fetch_single_product(url)]
        return self.fetch_store_catalog(url)
