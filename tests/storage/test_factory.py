"""Tests for object store selection."""

from mperf.core.config import load_settings
from mperf.storage import GCSObjectStore, LocalObjectStore, create_store


def test_create_local_store(tmp_path):
    store = create_store(load_settings(STORAGE_BACKEND="local", LOCAL_ROOT=str(tmp_path)))

    assert isinstance(store, LocalObjectStore)
    assert store.base_path == tmp_path


def test_create_gcs_store():
    store = create_store(
        load_settings(STORAGE_BACKEND="gcs", GCS_BUCKET_NAME="perf-bucket", GCP_PROJECT_ID="proj")
    )

    assert isinstance(store, GCSObjectStore)
    assert store.bucket_name == "perf-bucket"
    assert store.project_id == "proj"
