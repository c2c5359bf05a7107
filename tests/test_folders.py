"""
Unit tests for folders.py

Tests:
- Grouping by top-level folder with "(root)" fallback
- Deterministic (sorted) folder order and default selection
- select_bucket() lookups and BucketNotFound
"""

import os
import sys
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from viewer_core.config import ViewerConfig
from viewer_core.errors import BucketNotFound
from viewer_core.folders import bucket_name_for, partition, relative_path_of


@dataclass
class MockFile:
    """Browser-style file handle."""
    name: str
    relative_path: Optional[str] = None
    size: int = 0


class TestPartition:
    def test_empty_selection(self):
        """No files: no buckets, nothing selected."""
        result = partition([])
        assert result.buckets == {}
        assert result.ordered_bucket_names == []
        assert result.selected_bucket is None
        assert result.is_empty

    def test_groups_by_first_segment(self):
        result = partition(["a/x.dcm", "a/y.dcm", "b/z.dcm"])
        assert result.buckets == {"a": ["a/x.dcm", "a/y.dcm"], "b": ["b/z.dcm"]}
        assert result.ordered_bucket_names == ["a", "b"]
        assert result.selected_bucket == "a"

    def test_flat_file_goes_to_root(self):
        result = partition(["solo.dcm"])
        assert result.buckets == {"(root)": ["solo.dcm"]}
        assert result.selected_bucket == "(root)"

    def test_order_is_sorted_not_insertion(self):
        """Same file set in any order yields the same folder list."""
        files = ["zeta/1.dcm", "Alpha/1.dcm", "beta/1.dcm"]
        first = partition(files)
        second = partition(list(reversed(files)))
        assert first.ordered_bucket_names == ["Alpha", "beta", "zeta"]
        assert second.ordered_bucket_names == first.ordered_bucket_names
        assert first.selected_bucket == "Alpha"

    def test_every_file_in_exactly_one_bucket(self):
        files = ["s1/a.dcm", "s2/b.dcm", "c.dcm", "s1/sub/d.dcm", "s2/e.dcm"]
        result = partition(files)
        flattened = [f for name in result.ordered_bucket_names for f in result.buckets[name]]
        assert sorted(flattened) == sorted(files)
        assert len(flattened) == len(files)

    def test_uses_relative_path_of_file_handles(self):
        files = [
            MockFile(name="img1.dcm", relative_path="study/img1.dcm"),
            MockFile(name="img2.dcm", relative_path="study/img2.dcm"),
            MockFile(name="loose.dcm"),
        ]
        result = partition(files)
        assert result.ordered_bucket_names == ["(root)", "study"]
        assert [f.name for f in result.buckets["study"]] == ["img1.dcm", "img2.dcm"]

    def test_custom_root_sentinel(self):
        result = partition(["solo.dcm"], ViewerConfig(root_bucket="<top>"))
        assert result.ordered_bucket_names == ["<top>"]


class TestSelectBucket:
    def test_returns_files_in_original_order(self):
        result = partition(["b/2.dcm", "a/9.dcm", "b/1.dcm"])
        assert result.select_bucket("b") == ["b/2.dcm", "b/1.dcm"]
        assert result.selected_bucket == "b"

    def test_unknown_bucket_raises(self):
        result = partition(["a/x.dcm"])
        with pytest.raises(BucketNotFound) as exc_info:
            result.select_bucket("missing")
        assert exc_info.value.name == "missing"
        assert "a" in str(exc_info.value)
        assert result.selected_bucket == "a"

    def test_bucket_not_found_is_a_key_error(self):
        with pytest.raises(KeyError):
            partition([]).select_bucket("anything")

    def test_files_to_load_defaults_to_first_bucket(self):
        result = partition(["b/1.dcm", "a/1.dcm"])
        assert result.files_to_load() == ["a/1.dcm"]


class TestPathHelpers:
    def test_bucket_name_for(self):
        assert bucket_name_for("series/img.dcm") == "series"
        assert bucket_name_for("img.dcm") == "(root)"

    def test_relative_path_of_pathlike(self):
        assert relative_path_of(PurePosixPath("a/b.dcm")) == "a/b.dcm"

    def test_relative_path_of_browser_attribute(self):
        class BrowserFile:
            name = "x.dcm"
            webkitRelativePath = "dir/x.dcm"
        assert relative_path_of(BrowserFile()) == "dir/x.dcm"
