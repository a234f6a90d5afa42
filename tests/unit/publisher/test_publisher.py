"""
Tests for product, media and variant writes.
"""

import json

import pytest
import responses

from catalog_importer.models.product import ProductOption, ScrapedProduct, ScrapedVariant
from catalog_importer.publisher import (
    DownloadFailed,
    LocationUnavailable,
    ProductCreateFailed,
    StagedUploadFailed,
    build_product_input,
    build_variant_input,
)

IMAGE_URL = "https://cdn.example-store.com/shirt-1.jpg"
TARGET_URL = "https://uploads.example-cdn.com/staged/abc"
RESOURCE_URL = "https://uploads.example-cdn.com/staged/abc/resource"
LOCATION = "gid://shopify/Location/1"


def staged_target_body():
    return {
        "data": {
            "stagedUploadsCreate": {
                "stagedTargets": [{"url": TARGET_URL, "resourceUrl": RESOURCE_URL, "parameters": []}],
                "userErrors": [],
            }
        }
    }


def graphql_variables(call):
    return json.loads(call.request.body)["variables"]


@pytest.fixture
def plain_product():
    return ScrapedProduct(
        title="Linen Shirt",
        description_html="<p>Breathable linen.</p>",
        vendor="Acme",
        source_url="https://example-store.com/products/linen-shirt",
        images=[IMAGE_URL],
        options=[ProductOption(name="Title", values=["Default Title"])],
        variants=[ScrapedVariant(title="Default Title", price="19.99", sku="SHIRT-1", selected_options=["Default Title"])],
    )


@pytest.fixture
def sized_variants():
    return [
        ScrapedVariant(title="S", price="49.50", sku="T-S", inventory_quantity=3, selected_options=["S", "Sand", None]),
        ScrapedVariant(title="M", price="49.50", sku="T-M", inventory_quantity=0, selected_options=["M", "Sand", None]),
        ScrapedVariant(
            title="L",
            price="52.00",
            sku="T-L",
            inventory_quantity=12,
            selected_options=["L", "Sand", "Cotton", "Extra"],
        ),
    ]


class TestBuildInputs:
    def test_default_option_not_sent(self, plain_product):
        assert "productOptions" not in build_product_input(plain_product)

    def test_real_options_sent(self, plain_product):
        product = plain_product.model_copy(
            update={"options": [ProductOption(name="Size", values=["S", "M"])]}
        )

        assert build_product_input(product)["productOptions"] == [
            {"name": "Size", "values": [{"name": "S"}, {"name": "M"}]}
        ]

    def test_variant_rows(self, sized_variants):
        rows = build_variant_input(sized_variants, LOCATION, ["Size", "Colour", "Fabric"])

        assert len(rows) == 3
        assert [row["price"] for row in rows] == ["49.50", "49.50", "52.00"]
        assert [row["sku"] for row in rows] == ["T-S", "T-M", "T-L"]
        assert rows[0]["optionValues"] == [
            {"name": "S", "optionName": "Size"},
            {"name": "Sand", "optionName": "Colour"},
        ]
        # A fourth selection has no slot and is dropped
        assert [v["name"] for v in rows[2]["optionValues"]] == ["L", "Sand", "Cotton"]
        assert rows[1]["inventoryQuantities"] == [{"availableQuantity": 0, "locationId": LOCATION}]
        assert rows[2]["inventoryQuantities"] == [{"availableQuantity": 12, "locationId": LOCATION}]


class TestUploadMedia:
    @responses.activate
    def test_download_reencode_stage_and_put(self, publisher, endpoint, png_bytes):
        responses.add(responses.GET, IMAGE_URL, body=png_bytes(), content_type="image/png")
        responses.add(responses.POST, endpoint, json=staged_target_body())
        responses.add(responses.PUT, TARGET_URL, status=200)

        assert publisher.upload_media(IMAGE_URL) == RESOURCE_URL

        staged = graphql_variables(responses.calls[1])["input"][0]
        assert staged["mimeType"] == "image/jpeg"
        assert staged["httpMethod"] == "PUT"

        put = responses.calls[2].request
        assert put.method == "PUT"
        assert put.body[:2] == b"\xff\xd8"
        assert put.headers["Content-Type"] == "image/jpeg"
        assert staged["fileSize"] == str(len(put.body))

    @responses.activate
    def test_source_404(self, publisher):
        responses.add(responses.GET, IMAGE_URL, status=404)

        with pytest.raises(DownloadFailed):
            publisher.upload_media(IMAGE_URL)

    @responses.activate
    def test_unreadable_image(self, publisher):
        responses.add(responses.GET, IMAGE_URL, body=b"<html>not an image</html>")

        with pytest.raises(DownloadFailed):
            publisher.upload_media(IMAGE_URL)

    @responses.activate
    def test_staging_user_error(self, publisher, endpoint, png_bytes):
        responses.add(responses.GET, IMAGE_URL, body=png_bytes())
        responses.add(
            responses.POST,
            endpoint,
            json={
                "data": {
                    "stagedUploadsCreate": {
                        "stagedTargets": [],
                        "userErrors": [{"field": ["input"], "message": "File size is invalid"}],
                    }
                }
            },
        )

        with pytest.raises(StagedUploadFailed) as exc_info:
            publisher.upload_media(IMAGE_URL)
        assert exc_info.value.message == "File size is invalid"

    @responses.activate
    def test_put_rejected(self, publisher, endpoint, png_bytes):
        responses.add(responses.GET, IMAGE_URL, body=png_bytes())
        responses.add(responses.POST, endpoint, json=staged_target_body())
        responses.add(responses.PUT, TARGET_URL, status=403)

        with pytest.raises(StagedUploadFailed):
            publisher.upload_media(IMAGE_URL)


class TestCreateProduct:
    @responses.activate
    def test_returns_product_id(self, publisher, endpoint, plain_product):
        responses.add(
            responses.POST,
            endpoint,
            json={"data": {"productCreate": {"product": {"id": "gid://shopify/Product/9", "title": "Linen Shirt"}, "userErrors": []}}},
        )

        product_id = publisher.create_product(plain_product, [RESOURCE_URL], LOCATION)

        assert product_id == "gid://shopify/Product/9"
        variables = graphql_variables(responses.calls[0])
        assert variables["product"]["title"] == "Linen Shirt"
        assert variables["media"] == [
            {"alt": "Linen Shirt", "mediaContentType": "IMAGE", "originalSource": RESOURCE_URL}
        ]

    @responses.activate
    def test_user_error_raised(self, publisher, endpoint, plain_product):
        responses.add(
            responses.POST,
            endpoint,
            json={"data": {"productCreate": {"product": None, "userErrors": [{"field": ["title"], "message": "Title can't be blank"}]}}},
        )

        with pytest.raises(ProductCreateFailed) as exc_info:
            publisher.create_product(plain_product, [], LOCATION)
        assert exc_info.value.message == "Title can't be blank"

    @responses.activate
    def test_missing_product_raised(self, publisher, endpoint, plain_product):
        responses.add(responses.POST, endpoint, json={"errors": [{"message": "Internal error"}]})

        with pytest.raises(ProductCreateFailed):
            publisher.create_product(plain_product, [], LOCATION)


class TestCreateVariants:
    @responses.activate
    def test_sends_every_variant(self, publisher, endpoint, sized_variants):
        responses.add(
            responses.POST,
            endpoint,
            json={"data": {"productVariantsBulkCreate": {"productVariants": [], "userErrors": []}}},
        )

        errors = publisher.create_variants("gid://shopify/Product/9", sized_variants, LOCATION, ["Size", "Colour"])

        assert errors == []
        variables = graphql_variables(responses.calls[0])
        assert variables["productId"] == "gid://shopify/Product/9"
        assert variables["strategy"] == "REMOVE_STANDALONE_VARIANT"
        assert len(variables["variants"]) == 3

    @responses.activate
    def test_user_errors_returned_not_raised(self, publisher, endpoint, sized_variants):
        user_errors = [{"field": ["variants", "0"], "message": "SKU already taken"}]
        responses.add(
            responses.POST,
            endpoint,
            json={"data": {"productVariantsBulkCreate": {"productVariants": [], "userErrors": user_errors}}},
        )

        assert publisher.create_variants("gid://shopify/Product/9", sized_variants, LOCATION) == user_errors

    def test_no_variants_no_request(self, publisher):
        assert publisher.create_variants("gid://shopify/Product/9", [], LOCATION) == []


class TestPrimaryLocation:
    @responses.activate
    def test_first_location(self, publisher, endpoint):
        responses.add(
            responses.POST,
            endpoint,
            json={"data": {"locations": {"edges": [{"node": {"id": LOCATION}}]}}},
        )

        assert publisher.get_primary_location() == LOCATION

    @responses.activate
    def test_no_locations(self, publisher, endpoint):
        responses.add(responses.POST, endpoint, json={"data": {"locations": {"edges": []}}})

        with pytest.raises(LocationUnavailable):
            publisher.get_primary_location()


class TestClose:
    def test_closes_api_and_media_sessions(self, publisher, monkeypatch):
        closed = []
        monkeypatch.setattr(publisher.client.session, "close", lambda: closed.append("api"))
        monkeypatch.setattr(publisher.http, "close", lambda: closed.append("media"))

        publisher.close()

        assert closed == ["api", "media"]
