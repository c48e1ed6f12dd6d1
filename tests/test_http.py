# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Tests for the requests wrapper."""

from unittest.mock import MagicMock

import pytest
import requests

from alpinebox.errors import NetworkError, ParseError
from alpinebox.utils.http import HttpClient


def response(text="", json_data=None, status=200, chunks=None):
    resp = MagicMock()
    resp.text = text
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    if json_data is None:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = json_data
    resp.iter_content.return_value = chunks or []
    return resp


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


def test_timeout_is_always_passed(session):
    session.get.return_value = response(text="ok")
    HttpClient(timeout=7, session=session).get_text("http://x/")
    assert session.get.call_args.kwargs["timeout"] == 7


def test_sets_user_agent(session):
    HttpClient(session=session)
    assert session.headers["User-Agent"].startswith("alpinebox/")


def test_timeout_becomes_network_error(session):
    session.get.side_effect = requests.Timeout("read timed out")
    with pytest.raises(NetworkError):
        HttpClient(session=session).get_text("http://x/")


def test_connection_error_becomes_network_error(session):
    session.get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(NetworkError):
        HttpClient(session=session).get_json("http://x/")


def test_http_error_status(session):
    session.get.return_value = response(status=503)
    with pytest.raises(NetworkError):
        HttpClient(session=session).get_text("http://x/")


def test_empty_body_is_network_error(session):
    session.get.return_value = response(text="  \n")
    with pytest.raises(NetworkError):
        HttpClient(session=session).get_text("http://x/")


def test_bad_json_is_parse_error(session):
    session.get.return_value = response(text="<html>")
    with pytest.raises(ParseError):
        HttpClient(session=session).get_json("http://x/")


def test_download_writes_chunks(session, tmp_path):
    session.get.return_value = response(chunks=[b"ab", b"", b"cd"])
    dest = tmp_path / "out"

    written = HttpClient(download_timeout=99, session=session).download("http://x/bin", dest)

    assert written == 4
    assert dest.read_bytes() == b"abcd"
    assert session.get.call_args.kwargs["timeout"] == 99
    assert session.get.call_args.kwargs["stream"] is True


def test_empty_download_is_network_error(session, tmp_path):
    session.get.return_value = response(chunks=[])
    with pytest.raises(NetworkError):
        HttpClient(session=session).download("http://x/bin", tmp_path / "out")
