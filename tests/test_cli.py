"""
Unit tests for the viewer-tags CLI
"""

import os
from pathlib import Path
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from viewer_core.cli import find_input_files, main


class TestFindInputFiles:
    def test_single_file(self, dicom_file):
        assert find_input_files(Path(dicom_file)) == ["image.dcm"]

    def test_directory(self, study_dir):
        assert find_input_files(study_dir) == [
            "series_a/img1.dcm",
            "series_a/img2.dcm",
            "series_b/img1.dcm",
        ]


class TestMain:
    def test_prints_rows_for_file(self, dicom_file, capsys):
        assert main([dicom_file]) == 0
        out = capsys.readouterr().out
        assert "PatientName\tTest^Synthetic" in out
        assert "ReferencedImageSequence\t" in out
        assert "[1] ReferencedSOPInstanceUID\t1.2.3.1" in out
        assert "PixelData" not in out

    def test_search_and_instance(self, dicom_file, capsys):
        assert main([dicom_file, "--search", "instancenumber", "--instance", "5"]) == 0
        out = capsys.readouterr().out
        assert out.strip().splitlines() == ["InstanceNumber\t5"]

    def test_plain_mode_uses_keys(self, dicom_file, capsys):
        assert main([dicom_file, "--plain", "--search", "test^synthetic"]) == 0
        assert capsys.readouterr().out.strip() == "00100010\tTest^Synthetic"

    def test_list_folders(self, study_dir, capsys):
        assert main([str(study_dir), "--list-folders"]) == 0
        assert capsys.readouterr().out.strip().splitlines() == ["series_a\t2", "series_b\t1"]

    def test_loose_files_are_root_folder(self, tmp_path, capsys):
        (tmp_path / "a.dcm").write_bytes(b"")
        assert main([str(tmp_path), "--list-folders"]) == 0
        assert capsys.readouterr().out.strip() == "(root)\t1"

    def test_directory_reads_first_folder(self, study_dir, capsys):
        assert main([str(study_dir), "--search", "series^"]) == 0
        out = capsys.readouterr().out
        assert "# series_a/img1.dcm" in out
        assert "# series_a/img2.dcm" in out
        assert "Series^A" in out
        assert "Series^B" not in out

    def test_select_folder(self, study_dir, capsys):
        assert main([str(study_dir), "--folder", "series_b", "--search", "series^"]) == 0
        assert capsys.readouterr().out.strip() == "PatientName\tSeries^B"

    def test_selected_folder_prints_every_file(self, study_dir, capsys):
        assert main([str(study_dir), "--folder", "series_a", "--search", "series^"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "# series_a/img1.dcm",
            "PatientName\tSeries^A",
            "# series_a/img2.dcm",
            "PatientName\tSeries^A",
        ]

    def test_single_input_path(self, dicom_file):
        with pytest.raises(SystemExit):
            main([dicom_file, dicom_file])

    def test_unknown_folder(self, study_dir, capsys):
        assert main([str(study_dir), "--folder", "nope"]) == 1
        assert "nope" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.dcm")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_unreadable_file(self, tmp_path):
        bad = tmp_path / "notes.txt"
        bad.write_text("not a dicom file\n")
        assert main([str(bad)]) == 1
