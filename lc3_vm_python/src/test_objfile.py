import struct

import pytest

import common
import architecture as arch
import objfile

def object_bytes(*words):
    return struct.pack(f">{len(words)}H", *words)

def test_parse_origin_and_words():
    origin, words = objfile.parse_object_bytes(object_bytes(0x3000, 0x1021, 0xF025))
    assert origin == 0x3000
    assert words == [0x1021, 0xF025]

def test_words_are_big_endian():
    origin, words = objfile.parse_object_bytes(bytes([0x30, 0x00, 0x12, 0x34]))
    assert origin == 0x3000
    assert words == [0x1234]

def test_origin_only():
    origin, words = objfile.parse_object_bytes(object_bytes(0x4000))
    assert origin == 0x4000
    assert words == []

@pytest.mark.parametrize("data", [b"", b"\x30"])
def test_too_short(data):
    with pytest.raises(common.ObjectFileError):
        objfile.parse_object_bytes(data)

def test_odd_length():
    with pytest.raises(common.ObjectFileError):
        objfile.parse_object_bytes(b"\x30\x00\x10")

def test_program_past_end_of_memory():
    with pytest.raises(common.ObjectFileError):
        objfile.parse_object_bytes(object_bytes(0xFFFF, 1, 2))

def test_program_ending_at_top_of_memory():
    origin, words = objfile.parse_object_bytes(object_bytes(0xFFFE, 1, 2))
    image = objfile.build_memory_image(origin, words)
    assert image[0xFFFE] == 1
    assert image[0xFFFF] == 2

def test_build_memory_image():
    image = objfile.build_memory_image(0x3000, [0x1021, 0xF025])
    assert len(image) == arch.mem_size
    assert image[0x3000] == 0x1021
    assert image[0x3001] == 0xF025
    assert image[0x2FFF] == 0
    assert image[0x3002] == 0
    assert sum(image) == 0x1021 + 0xF025

def test_load_object_file(tmp_path):
    path = tmp_path / "prog.obj"
    path.write_bytes(object_bytes(0x3000, 0xE002, 0xF022, 0xF025))
    image = objfile.load_object_file(path)
    assert image[0x3000:0x3003] == [0xE002, 0xF022, 0xF025]

def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        objfile.load_object_file(tmp_path / "missing.obj")
