import pytest

from mfg_attachments.utils.filesystem import StagedFile, format_file_size, sanitize_filename


class TestStagedFile:
    def test_from_path_reads_size_and_bytes(self, tmp_path):
        path = tmp_path / "holes.drl"
        path.write_bytes(b"M48\nT01C0.8\n")

        file = StagedFile.from_path(path)

        assert file.name == "holes.drl"
        assert file.size == 12
        assert file.read_bytes() == b"M48\nT01C0.8\n"

    def test_from_bytes(self):
        file = StagedFile.from_bytes("job.pdf", b"%PDF")
        assert file.size == 4
        assert file.mime_type == "application/pdf"

    def test_unknown_mime_type(self):
        assert StagedFile.from_bytes("LICENSE", b"").mime_type == "application/octet-stream"

    def test_missing_content(self):
        with pytest.raises(FileNotFoundError):
            StagedFile(name="ghost.pdf", size=1).read_bytes()


@pytest.mark.parametrize("size,expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (50 * 1024 * 1024, "50 MB"),
    (3 * 1024 ** 3, "3 GB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_sanitize_filename():
    assert sanitize_filename("top layer (rev2).gbr") == "top_layer__rev2_.gbr"
