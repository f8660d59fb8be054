"""Tests for core.catalog_linker.CatalogLinker."""

from unittest.mock import MagicMock

import pytest

from core.catalog_linker import CatalogLinker, RESET_ORDER, SeedingSummary
from core.dataset import parse_dataset
from core.exceptions import AppwriteAPIError, CatalogCreationFailure, ResetFailure
from core.image_ingestion import ImageIngestionWorker
from core.reset_manager import ResetManager

REMOTE_IMAGE = "https://cdn.example.com/images/wrap.png?w=400"


def scenario_dataset(image_url="burger-one.png", category_name="Burgers"):
    return parse_dataset({
        "categories": [
            {"name": "Burgers", "description": "Grilled"},
            {"name": "Pizzas", "description": "Baked"},
        ],
        "customizations": [
            {"name": "Extra Cheese", "price": 25, "type": "topping"},
            {"name": "Fries", "price": 35, "type": "side"},
            {"name": "Coke", "price": 30, "type": "side"},
        ],
        "menu": [
            {
                "name": "Classic Cheeseburger",
                "description": "Beef patty",
                "image_url": image_url,
                "price": 25.99,
                "rating": 4.5,
                "calories": 550,
                "protein": 25,
                "category_name": category_name,
                "customizations": ["Extra Cheese", "Fries", "Truffle Mayo"],
            }
        ],
    })


def _image_http():
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.headers = {"Content-Type": "image/png"}
    response.iter_content.side_effect = lambda chunk_size: iter([b"\x89PNG"])
    http = MagicMock()
    http.get.return_value = response
    return http


def make_linker(fake, collections, dataset=None, http=None):
    return CatalogLinker(
        fake,
        dataset or scenario_dataset(),
        collections,
        ResetManager(fake),
        ImageIngestionWorker(fake, http_session=http or _image_http()),
    )


def _docs(fake, collections, key):
    return list(fake.documents[collections[key]].values())


def test_scenario_counts_and_missing_link_warning(fake_appwrite, collections, capsys):
    summary = make_linker(fake_appwrite, collections).seed()

    assert len(_docs(fake_appwrite, collections, "categories")) == 2
    assert len(_docs(fake_appwrite, collections, "customizations")) == 3
    assert len(_docs(fake_appwrite, collections, "menu")) == 1
    assert len(_docs(fake_appwrite, collections, "menu_customizations")) == 2

    assert summary.categories_created == 2
    assert summary.customizations_created == 3
    assert summary.menu_items_created == 1
    assert summary.links_created == 2
    assert summary.link_warnings == [
        "Customization 'Truffle Mayo' not found for menu item 'Classic Cheeseburger'"
    ]
    assert summary.remote_counts == {"menu": 1, "customizations": 3, "menu_customizations": 2}
    assert summary.verified is True
    assert capsys.readouterr().out.count("WARNING: Customization 'Truffle Mayo'") == 1


def test_menu_item_points_at_its_category(fake_appwrite, collections):
    make_linker(fake_appwrite, collections).seed()
    burgers = next(
        d for d in _docs(fake_appwrite, collections, "categories") if d["name"] == "Burgers"
    )
    menu = _docs(fake_appwrite, collections, "menu")[0]
    assert menu["categories"] == burgers["$id"]
    assert menu["image_url"] == "burger-one.png"


def test_links_reference_existing_records(fake_appwrite, collections):
    make_linker(fake_appwrite, collections).seed()
    menu_ids = set(fake_appwrite.documents[collections["menu"]])
    customization_ids = set(fake_appwrite.documents[collections["customizations"]])
    for link in _docs(fake_appwrite, collections, "menu_customizations"):
        assert link["menu"] in menu_ids
        assert link["customizations"] in customization_ids


def test_links_created_right_after_their_menu_item(fake_appwrite, collections):
    dataset = parse_dataset({
        "categories": [{"name": "Burgers", "description": ""}],
        "customizations": [{"name": "Coke", "price": 30, "type": "side"}],
        "menu": [
            {"name": n, "description": "", "image_url": "burger-one.png", "price": 1,
             "rating": 4, "calories": 1, "protein": 1, "category_name": "Burgers",
             "customizations": ["Coke"]}
            for n in ("First", "Second")
        ],
    })
    make_linker(fake_appwrite, collections, dataset).seed()
    created = [args[0] for args in fake_appwrite.calls_named("create_document")]
    tail = created[-4:]
    assert tail == [
        collections["menu"], collections["menu_customizations"],
        collections["menu"], collections["menu_customizations"],
    ]


def test_remote_image_is_rehosted(fake_appwrite, collections):
    dataset = scenario_dataset(image_url=REMOTE_IMAGE)
    summary = make_linker(fake_appwrite, collections, dataset).seed()

    menu = _docs(fake_appwrite, collections, "menu")[0]
    file_id = next(iter(fake_appwrite.files))
    assert menu["image_url"] == (
        f"https://cloud.example.com/v1/storage/buckets/bucket-1/files/{file_id}/view?project=proj-1"
    )
    assert summary.images_uploaded == 1
    assert summary.files_deleted == 0


def test_failed_image_keeps_original_reference(fake_appwrite, collections):
    http = MagicMock()
    http.get.return_value = MagicMock(ok=False, status_code=503, reason="Unavailable")
    dataset = scenario_dataset(image_url=REMOTE_IMAGE)
    summary = make_linker(fake_appwrite, collections, dataset, http=http).seed()

    assert _docs(fake_appwrite, collections, "menu")[0]["image_url"] == REMOTE_IMAGE
    assert summary.images_degraded == 1
    assert fake_appwrite.files == {}


def test_skip_images_keeps_url_and_makes_no_storage_calls(fake_appwrite, collections):
    http = _image_http()
    dataset = scenario_dataset(image_url=REMOTE_IMAGE)
    summary = make_linker(fake_appwrite, collections, dataset, http=http).seed(skip_image_upload=True)

    assert _docs(fake_appwrite, collections, "menu")[0]["image_url"] == REMOTE_IMAGE
    assert fake_appwrite.storage_calls() == []
    http.get.assert_not_called()
    assert summary.files_deleted is None
    assert summary.images_skipped == 1


def test_seeding_twice_does_not_accumulate(fake_appwrite, collections):
    dataset = scenario_dataset(image_url=REMOTE_IMAGE)
    first = make_linker(fake_appwrite, collections, dataset).seed()
    counts_after_first = {cid: len(docs) for cid, docs in fake_appwrite.documents.items()}

    second = make_linker(fake_appwrite, collections, dataset).seed()
    counts_after_second = {cid: len(docs) for cid, docs in fake_appwrite.documents.items()}

    assert counts_after_first == counts_after_second
    assert len(fake_appwrite.files) == 1
    assert second.files_deleted == 1
    assert second.documents_deleted[collections["menu_customizations"]] == 2
    assert first.remote_counts == second.remote_counts


def test_reset_clears_links_before_parents(fake_appwrite, collections):
    make_linker(fake_appwrite, collections).seed()
    listed = [args[0] for args in fake_appwrite.calls_named("list_documents")]
    first_seen = []
    for cid in listed:
        if cid not in first_seen:
            first_seen.append(cid)
    assert first_seen == [collections[key] for key in RESET_ORDER]


def test_unknown_category_is_fatal(fake_appwrite, collections):
    dataset = scenario_dataset(category_name="Tacos")
    with pytest.raises(CatalogCreationFailure, match="unknown category 'Tacos'"):
        make_linker(fake_appwrite, collections, dataset).seed()
    assert _docs(fake_appwrite, collections, "menu") == []


def test_creation_failure_aborts_run(collections):
    client = MagicMock()
    client.list_documents.return_value = {"total": 0, "documents": []}
    client.list_files.return_value = {"total": 0, "files": []}
    client.create_document.side_effect = AppwriteAPIError(400, "Invalid document structure")
    linker = CatalogLinker(
        client, scenario_dataset(), collections, ResetManager(client), MagicMock()
    )
    with pytest.raises(CatalogCreationFailure) as exc_info:
        linker.seed()
    assert exc_info.value.kind == "category"
    assert exc_info.value.name == "Burgers"
    assert client.create_document.call_count == 1


def test_reset_failure_aborts_before_creation(fake_appwrite, collections):
    fake_appwrite.create_document(collections["menu"], {"name": "stale"})
    fake_appwrite.calls.clear()
    fake_appwrite.fail_on["delete_document"] = AppwriteAPIError(500, "boom")
    with pytest.raises(ResetFailure):
        make_linker(fake_appwrite, collections).seed()
    assert fake_appwrite.calls_named("create_document") == []


def test_missing_collection_ids_rejected(fake_appwrite, collections):
    collections["menu"] = ""
    with pytest.raises(ValueError, match="menu"):
        make_linker(fake_appwrite, collections)


def test_summary_not_verified_when_counts_differ():
    summary = SeedingSummary(menu_items_created=2, customizations_created=1, links_created=0)
    summary.remote_counts = {"menu": 1, "customizations": 1, "menu_customizations": 0}
    assert summary.verified is False
    assert summary.to_dict()["verified"] is False
