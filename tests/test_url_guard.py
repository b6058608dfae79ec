import unittest

from fetchproxy.app.errors import MalformedUrlError
from fetchproxy.app.url_guard import is_dangerous, parse_target_url


class UrlGuardTests(unittest.TestCase):
    def test_private_and_loopback_targets_are_blocked(self):
        for url in [
            "http://127.0.0.1/",
            "http://localhost:8080/",
            "HTTPS://LOCALHOST/",
            "http://0.0.0.0/",
            "http://192.168.1.5/admin",
            "http://10.0.0.1/",
            "https://172.16.0.1/",
            "https://172.31.255.255/",
            "http://169.254.169.254/latest/meta-data",
            "file:///etc/passwd",
        ]:
            self.assertTrue(is_dangerous(url), url)

    def test_non_http_schemes_are_blocked(self):
        self.assertTrue(is_dangerous("ftp://example.com/"))
        self.assertTrue(is_dangerous("javascript:alert(1)"))

    def test_public_targets_pass(self):
        for url in [
            "https://example.com/",
            "http://172.32.0.1/",
            "http://172.15.0.1/",
            "http://11.0.0.1/",
            "https://example.com/?next=http://10.0.0.1/",
        ]:
            self.assertFalse(is_dangerous(url), url)

    def test_hostnames_are_not_resolved(self):
        # textual check only: a name that points at a private address passes
        self.assertFalse(is_dangerous("http://internal.example.test/"))


class ParseTargetUrlTests(unittest.TestCase):
    def test_valid_urls_are_returned_stripped(self):
        self.assertEqual(parse_target_url("  https://example.com/a?b=1 "), "https://example.com/a?b=1")
        self.assertEqual(parse_target_url("file:///etc/passwd"), "file:///etc/passwd")
        self.assertEqual(parse_target_url("http://xn--bcher-kva.example/"), "http://xn--bcher-kva.example/")
        self.assertEqual(parse_target_url("http://my_host.example.com/"), "http://my_host.example.com/")

    def test_malformed_urls(self):
        for raw in ["not a url", "example.com", "http://", "http://exa mple.com/", "http://host:99999/", "http://[::1", "http://xn--/"]:
            with self.assertRaises(MalformedUrlError, msg=raw):
                parse_target_url(raw)


if __name__ == "__main__":
    unittest.main()
