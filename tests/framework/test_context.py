"""
Tests for the in-memory request and response contexts.
"""

import pytest

from apigate import BufferedResponse, SessionState, SimpleRequest


class TestSimpleRequest:
    def test_parameters(self):
        request = SimpleRequest({"a": "1"})
        assert request.get_parameter("a") == "1"
        assert request.get_parameter("b") is None
        assert request.method == "GET"

    def test_session_created_once(self):
        request = SimpleRequest()
        assert request.get_session() is request.get_session()

    def test_given_session(self):
        session = SessionState("s")
        assert SimpleRequest(session=session).get_session() is session


class TestBufferedResponse:
    def test_write_accumulates(self):
        response = BufferedResponse()
        response.write(b"ab")
        response.write(b"c", "text/plain")
        assert response.body == b"abc"
        assert response.media_type == "text/plain"
        assert not response.is_error

    def test_send_error_replaces_body(self):
        response = BufferedResponse()
        response.write(b"partial")
        response.send_error(409, "Access denied.")
        assert response.body == b""
        assert response.status == 409
        assert response.is_error
        assert response.error_message == "Access denied."

    def test_close_resolves_done(self):
        response = BufferedResponse()
        assert not response.done.done()
        response.close()
        response.close()
        assert response.wait(0) is response

    def test_write_after_close(self):
        response = BufferedResponse()
        response.close()
        with pytest.raises(RuntimeError):
            response.write(b"late")

    def test_wait_times_out(self):
        with pytest.raises(TimeoutError):
            BufferedResponse().wait(0.01)
