"""
Pytest configuration and fixtures for viewer_core tests.
"""
import os
import sys

import pytest
import pydicom
from pydicom.dataset import Dataset, FileDataset, FileMetaDataset
from pydicom.sequence import Sequence
from pydicom.uid import ExplicitVRLittleEndian

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


def build_dataset(path: str = "test.dcm", patient_name: str = "Test^Synthetic",
                  instance_number: int = 1, modality: str = "CT") -> FileDataset:
    """
    Build a small synthetic DICOM dataset with a two-item sequence.

    No clinical data. 1x1 8-bit pixel so PixelData is present but tiny.
    """
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = pydicom.uid.SecondaryCaptureImageStorage
    meta.MediaStorageSOPInstanceUID = pydicom.uid.generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(path, {}, file_meta=meta, preamble=b"\x00" * 128)

    ds.PatientName = patient_name
    ds.PatientID = "TEST_HARNESS"
    ds.SOPClassUID = meta.MediaStorageSOPClassUID
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.StudyInstanceUID = pydicom.uid.generate_uid()
    ds.SeriesInstanceUID = pydicom.uid.generate_uid()
    ds.Modality = modality
    ds.StudyDescription = "Synthetic Study"
    ds.InstanceNumber = instance_number
    ds.ImageType = ["ORIGINAL", "PRIMARY"]

    refs = []
    for i in range(2):
        ref = Dataset()
        ref.ReferencedSOPClassUID = pydicom.uid.CTImageStorage
        ref.ReferencedSOPInstanceUID = f"1.2.3.{i}"
        refs.append(ref)
    ds.ReferencedImageSequence = Sequence(refs)

    ds.Rows = 1
    ds.Columns = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.SamplesPerPixel = 1
    ds.BitsAllocated = 8
    ds.BitsStored = 8
    ds.HighBit = 7
    ds.PixelRepresentation = 0
    ds.PixelData = b"\x00"
    return ds


def write_dicom(path: str, **kwargs) -> str:
    """Write a synthetic DICOM file to `path` and return the path."""
    ds = build_dataset(path, **kwargs)
    ds.save_as(path, enforce_file_format=True)
    return path


@pytest.fixture
def dicom_dataset():
    """In-memory synthetic dataset (file meta included)."""
    return build_dataset()


@pytest.fixture
def dicom_file(tmp_path):
    """A synthetic DICOM file on disk."""
    return write_dicom(str(tmp_path / "image.dcm"))


@pytest.fixture
def study_dir(tmp_path):
    """
    A study folder with two series folders.

        study/
        ├── series_b/img1.dcm
        └── series_a/
            ├── img1.dcm
            └── img2.dcm
    """
    root = tmp_path / "study"
    (root / "series_a").mkdir(parents=True)
    (root / "series_b").mkdir()
    write_dicom(str(root / "series_a" / "img1.dcm"), patient_name="Series^A", instance_number=1)
    write_dicom(str(root / "series_a" / "img2.dcm"), patient_name="Series^A", instance_number=2)
    write_dicom(str(root / "series_b" / "img1.dcm"), patient_name="Series^B", instance_number=1)
    return root


@pytest.fixture
def structured_record():
    """
    Engine-style tag dictionary for a 3-instance series.

    Includes a per-instance value, a sequence, a private tag, binary data
    and PixelData.
    """
    return {
        "00020010": {"vr": "UI", "value": "1.2.840.10008.1.2.1"},
        "00100010": {"vr": "PN", "value": "Doe^Jane"},
        "00200013": {"vr": "IS", "value": ["1", "2", "3"]},
        "00200032": {"vr": "DS", "value": {"0": [0, 0, 0], "1": [0, 0, 5], "2": [0, 0, 10]}},
        "00280030": {"vr": "DS", "value": [0.5, 0.5]},
        "00081140": {"vr": "SQ", "value": [
            {"00081150": {"vr": "UI", "value": "1.2.840.10008.5.1.4.1.1.2"},
             "00081155": {"vr": "UI", "value": "1.2.3.0"}},
            {"00081150": {"vr": "UI", "value": "1.2.840.10008.5.1.4.1.1.2"},
             "00081155": {"vr": "UI", "value": "1.2.3.1"}},
        ]},
        "00091001": {"vr": "LO", "value": "private"},
        "00420011": {"vr": "OB", "value": bytes(range(20))},
        "7FE00010": {"vr": "OW", "value": bytes(4096)},
    }
