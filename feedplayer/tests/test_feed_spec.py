import unittest

from feedplayer.errors import FeedSpecError
from feedplayer.feed_spec import detect_source_kind, normalize_spreadsheet_url, parse_feed_spec, resolve_kind
from feedplayer.models import FeedSpec, SourceKind

NASA_URL = "https://api.nasa.gov/planetary/apod?api_key=DEMO_KEY&start_date=2024-01-01"
ISSUES_URL = "https://seeclickfix.com/api/v2/issues?status=open&per_page=5"
BSKY_URL = "https://bsky.app/profile/did:plc:ileopdnhib52emw3veem5zxk/rss"
SHEET_URL = "https://docs.google.com/spreadsheets/d/1AbCdEf/edit#gid=0"


class ParseFeedSpecTests(unittest.TestCase):
    def test_bare_urls_are_named_by_source_kind_in_order(self):
        spec = parse_feed_spec(f"{NASA_URL}|{ISSUES_URL}|{BSKY_URL}|{SHEET_URL}|https://example.com/feed.json")

        self.assertEqual(list(spec), ["nasa", "seeclickfix", "bsky", "googlesheet", "default"])
        self.assertEqual(spec["nasa"], (NASA_URL,))

    def test_explicit_keys_keep_query_strings_intact(self):
        spec = parse_feed_spec(f"apod={NASA_URL}|issues={ISSUES_URL}")

        self.assertEqual(list(spec), ["apod", "issues"])
        self.assertEqual(spec["apod"], (NASA_URL,))
        self.assertEqual(spec["issues"], (ISSUES_URL,))

    def test_key_count_matches_non_empty_segments(self):
        spec = parse_feed_spec(f" | {NASA_URL} ||  |{NASA_URL}| z={ISSUES_URL} ")

        self.assertEqual(len(spec), 3)
        self.assertEqual(list(spec), ["nasa", "nasa-2", "z"])

    def test_whitespace_separated_urls_share_one_key(self):
        spec = parse_feed_spec(f"issues={ISSUES_URL} {ISSUES_URL}&page=2")

        self.assertEqual(spec["issues"], (ISSUES_URL, f"{ISSUES_URL}&page=2"))

    def test_repeated_explicit_key_gets_numeric_suffix(self):
        with self.assertLogs("feedplayer.feed_spec", level="WARNING"):
            spec = parse_feed_spec("a=https://x/1|a=https://x/2|a=https://x/3")

        self.assertEqual(len(spec), 3)
        self.assertEqual(list(spec), ["a", "a-2", "a-3"])
        self.assertEqual(spec["a-2"], ("https://x/2",))

    def test_empty_input_is_rejected(self):
        for text in (None, "", "   ", "|", " | | "):
            with self.subTest(text=text):
                with self.assertRaises(FeedSpecError):
                    parse_feed_spec(text)

    def test_feed_type_hint_pins_bare_url_names(self):
        spec = parse_feed_spec("https://example.com/a.json", feed_type="nasa")

        self.assertEqual(list(spec), ["nasa"])


class DetectionTests(unittest.TestCase):
    def test_detection_is_first_match_wins(self):
        self.assertEqual(detect_source_kind(NASA_URL), SourceKind.IMAGE_OF_DAY)
        self.assertEqual(detect_source_kind(ISSUES_URL), SourceKind.CIVIC_ISSUE)
        self.assertEqual(detect_source_kind(BSKY_URL), SourceKind.SOCIAL_POST)
        self.assertEqual(detect_source_kind(SHEET_URL), SourceKind.SPREADSHEET_CSV)
        self.assertEqual(detect_source_kind("https://example.com"), SourceKind.GENERIC)
        # A proxy URL mentioning two hosts resolves by priority order.
        self.assertEqual(
            detect_source_kind("https://seeclickfix.com/proxy?to=https://api.nasa.gov/x"),
            SourceKind.IMAGE_OF_DAY,
        )

    def test_resolve_kind_with_hints(self):
        self.assertEqual(resolve_kind(ISSUES_URL, "mixed"), SourceKind.CIVIC_ISSUE)
        self.assertEqual(resolve_kind(ISSUES_URL, None), SourceKind.CIVIC_ISSUE)
        self.assertEqual(resolve_kind(ISSUES_URL, "bsky"), SourceKind.SOCIAL_POST)
        self.assertEqual(resolve_kind(ISSUES_URL, "not-a-kind"), SourceKind.CIVIC_ISSUE)


class SpreadsheetUrlTests(unittest.TestCase):
    def test_edit_url_is_rewritten_to_csv_export(self):
        self.assertEqual(
            normalize_spreadsheet_url(SHEET_URL),
            "https://docs.google.com/spreadsheets/d/1AbCdEf/gviz/tq?tqx=out:csv",
        )

    def test_export_forms_pass_through(self):
        published = "https://docs.google.com/spreadsheets/d/e/2PACX-1/pub?output=csv"
        gviz = "https://docs.google.com/spreadsheets/d/1AbCdEf/gviz/tq?tqx=out:csv"
        self.assertEqual(normalize_spreadsheet_url(published), published)
        self.assertEqual(normalize_spreadsheet_url(gviz), gviz)

    def test_unparseable_url_is_unchanged(self):
        url = "https://docs.google.com/spreadsheets/u/0/"
        self.assertEqual(normalize_spreadsheet_url(url), url)


class FeedSpecMappingTests(unittest.TestCase):
    def test_from_mapping_accepts_strings_and_lists(self):
        spec = FeedSpec.from_mapping({"a": "https://x/1|https://x/2", "b": ["https://y/1"], "c": "", "d": 5})

        self.assertEqual(list(spec), ["a", "b"])
        self.assertEqual(spec["a"], ("https://x/1", "https://x/2"))
        self.assertEqual(spec.default_key, "a")


if __name__ == "__main__":
    unittest.main()
