import os
import socket
import time

import pytest

from miniftpd.entities.transfer import (TransferAborted, TransferJob, TransferType, format_file_line,
                                        format_timestamp, iter_directory_listing, send_file, send_listing)

NOW = time.mktime((2024, 6, 15, 12, 0, 0, 0, 0, -1))


def run_and_collect(func, *args, **kwargs):
    """Ejecuta `func(sender, ...)` sobre un socketpair y devuelve (resultado, bytes recibidos)."""
    sender, receiver = socket.socketpair()
    try:
        result = func(sender, *args, **kwargs)
        sender.close()
        chunks = []
        while True:
            data = receiver.recv(4096)
            if not data:
                break
            chunks.append(data)
        return result, b"".join(chunks)
    finally:
        sender.close()
        receiver.close()


def test_recent_timestamp_shows_time():
    mtime = time.mktime((2024, 6, 15, 11, 5, 0, 0, 0, -1))
    assert format_timestamp(mtime, NOW) == "Jun 15 11:05"


def test_old_timestamp_shows_year():
    mtime = time.mktime((2023, 1, 5, 9, 30, 0, 0, 0, -1))
    assert format_timestamp(mtime, NOW) == "Jan 05  2023"


def test_file_line_format():
    mtime = time.mktime((2024, 6, 15, 11, 5, 0, 0, 0, -1))
    line = format_file_line("f.txt", 10, mtime, NOW)
    assert line == "-rw-r--r--    2 2003     2003     10 Jun 15 11:05 f.txt"


def test_listing_puts_directories_first(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"abc")
    (tmp_path / "z_dir").mkdir()
    (tmp_path / "b.txt").write_bytes(b"")
    (tmp_path / "m_dir").mkdir()

    lines = list(iter_directory_listing(str(tmp_path)))

    assert len(lines) == 4
    assert all(line.startswith("d") for line in lines[:2])
    assert all(line.startswith("-") for line in lines[2:])
    assert {line.split()[-1] for line in lines[:2]} == {"z_dir", "m_dir"}
    sizes = {line.split()[-1]: line.split()[4] for line in lines[2:]}
    assert sizes == {"a.txt": "3", "b.txt": "0"}


def test_send_listing_uses_crlf(alice_home):
    count, data = run_and_collect(send_listing, str(alice_home))

    assert count == 2
    lines = data.split(b"\r\n")
    assert lines[-1] == b""
    assert lines[0].startswith(b"drwxr-xr-x") and lines[0].endswith(b" sub")
    assert lines[1].startswith(b"-rw-r--r--") and lines[1].endswith(b" f.txt")
    assert lines[1].split()[4] == b"10"


def test_binary_transfer_is_verbatim(tmp_path):
    payload = bytes(range(256)) * 300 + b"a\r\nb\n"
    path = tmp_path / "blob.bin"
    path.write_bytes(payload)

    sent, data = run_and_collect(send_file, str(path), TransferType.BINARY)

    assert sent == len(payload)
    assert data == payload


def test_ascii_transfer_translates_line_endings(tmp_path):
    path = tmp_path / "text.txt"
    path.write_bytes(b"one\ntwo\r\nthree\n")

    _, data = run_and_collect(send_file, str(path), TransferType.ASCII)

    assert data == b"one\r\ntwo\r\nthree\r\n"


def test_ascii_transfer_replaces_non_ascii(tmp_path):
    path = tmp_path / "accents.txt"
    path.write_bytes("año\n".encode("utf-8"))

    _, data = run_and_collect(send_file, str(path), TransferType.ASCII)

    assert data == b"a?o\r\n"


def test_transfer_stops_when_control_is_gone(tmp_path):
    path = tmp_path / "f.bin"
    path.write_bytes(b"x" * 10)

    with pytest.raises(TransferAborted):
        run_and_collect(send_file, str(path), TransferType.BINARY, should_abort=lambda: True)


def test_job_dispatches_by_command(alice_home):
    _, listing = run_and_collect(TransferJob("LIST", str(alice_home)).run)
    _, content = run_and_collect(TransferJob("RETR", os.path.join(str(alice_home), "f.txt"), TransferType.BINARY).run)

    assert b"f.txt" in listing
    assert content == b"0123456789"
