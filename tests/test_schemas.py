import unittest

from pydantic import ValidationError

from fetchproxy.app.schemas import FetchRequest, FetchSuccess


class SchemaTests(unittest.TestCase):
    def test_request_url_defaults_to_none(self):
        self.assertIsNone(FetchRequest.model_validate_json(b"{}").url)

    def test_request_ignores_extra_fields(self):
        payload = FetchRequest.model_validate_json(b'{"url": "https://example.com/", "mode": "raw"}')
        self.assertEqual(payload.url, "https://example.com/")

    def test_request_rejects_non_object(self):
        with self.assertRaises(ValidationError):
            FetchRequest.model_validate_json(b'"https://example.com/"')

    def test_success_body_shape(self):
        body = FetchSuccess(html="<p></p>", size=7, cached=False).model_dump()
        self.assertEqual(body, {"html": "<p></p>", "size": 7, "cached": False})


if __name__ == "__main__":
    unittest.main()
