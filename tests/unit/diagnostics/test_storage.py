from diagnostics.storage import clear_images, list_images


def test_list_images_ignores_other_files(tmp_path):
    (tmp_path / "a.png").write_bytes(b"")
    (tmp_path / "b.JPG").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")
    (tmp_path / "nested.png").mkdir()

    assert [p.name for p in list_images(tmp_path)] == ["a.png", "b.JPG"]


def test_list_images_missing_dir(tmp_path):
    assert list_images(tmp_path / "missing") == []


def test_clear_images_counts_and_keeps_other_files(tmp_path):
    (tmp_path / "a.png").write_bytes(b"")
    (tmp_path / "b.jpeg").write_bytes(b"")
    (tmp_path / "keep.txt").write_text("x")

    assert clear_images(tmp_path) == 2
    assert clear_images(tmp_path) == 0
    assert (tmp_path / "keep.txt").exists()
