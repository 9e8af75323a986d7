import unittest

from feedplayer.adapters import build_registry, normalize_response, with_media
from feedplayer.adapters.civic_issue import CivicIssueAdapter, substitute_coordinates
from feedplayer.adapters.generic import GenericAdapter
from feedplayer.adapters.image_of_day import ImageOfDayAdapter
from feedplayer.adapters.social_post import SocialPostAdapter
from feedplayer.adapters.spreadsheet import SpreadsheetAdapter, parse_csv_rows
from feedplayer.models import MediaKind, SourceKind

RSS_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>@someone.bsky.social</title>
    <item>
      <title>First post</title>
      <description>Hello sky</description>
      <link>https://bsky.app/profile/someone/post/1</link>
      <pubDate>Mon, 01 Jan 2024 10:00:00 +0000</pubDate>
      <enclosure url="https://cdn.bsky.app/img/one.jpg" type="image/jpeg" length="1" />
    </item>
    <item>
      <title>Second post</title>
      <description>No picture here</description>
      <link>https://bsky.app/profile/someone/post/2</link>
    </item>
  </channel>
</rss>
"""


class ImageOfDayAdapterTests(unittest.TestCase):
    def test_single_object_is_wrapped(self):
        items = ImageOfDayAdapter().normalize(
            {
                "title": "Pillars",
                "explanation": "Gas and dust",
                "url": "https://apod.nasa.gov/pillars.jpg",
                "hdurl": "https://apod.nasa.gov/pillars_hd.jpg",
                "date": "2024-01-01",
                "media_type": "image",
            },
            "https://api.nasa.gov/planetary/apod",
        )

        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.title, "Pillars")
        self.assertEqual(item.description, "Gas and dust")
        self.assertEqual(item.media_kind, MediaKind.IMAGE)
        self.assertEqual(item.source, "NASA APOD")
        self.assertEqual(item.get("hdurl"), "https://apod.nasa.gov/pillars_hd.jpg")

    def test_missing_fields_get_defaults(self):
        items = ImageOfDayAdapter().normalize([{}, {"hdurl": "https://x/clip.mp4"}], "u")

        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].title, "")
        self.assertIsNone(items[0].media_url)
        self.assertEqual(items[0].media_kind, MediaKind.TEXT)
        self.assertEqual(items[1].media_kind, MediaKind.VIDEO)

    def test_youtube_embed_is_unknown(self):
        items = ImageOfDayAdapter().normalize({"url": "https://www.youtube.com/embed/abc?rel=0"}, "u")

        self.assertEqual(items[0].media_kind, MediaKind.UNKNOWN)
        self.assertFalse(items[0].is_playable)


class CivicIssueAdapterTests(unittest.TestCase):
    BODY = {
        "issues": [
            {
                "summary": "Pothole",
                "description": "Deep one",
                "created_at": "2024-02-02T10:00:00Z",
                "lat": 41.3,
                "media": {"image_full": "https://scf/full.png", "representative_image_url": "https://scf/rep.png"},
            },
            {"summary": "Streetlight out", "media": {"representative_image_url": "https://scf/light.jpg"}},
            {"title": "No media at all"},
        ]
    }

    def test_issues_are_unwrapped_and_mapped(self):
        items = CivicIssueAdapter().normalize(self.BODY, "https://seeclickfix.com/api/v2/issues")

        self.assertEqual([item.title for item in items], ["Pothole", "Streetlight out", "No media at all"])
        self.assertEqual(items[0].media_url, "https://scf/full.png")
        self.assertEqual(items[1].media_url, "https://scf/light.jpg")
        self.assertEqual(items[0].get("lat"), "41.3")
        self.assertEqual(items[0].source, "SeeClickFix")

    def test_issue_without_media_is_excluded_from_media_view(self):
        items = CivicIssueAdapter().normalize(self.BODY, "u")

        self.assertEqual(items[2].media_kind, MediaKind.TEXT)
        self.assertEqual(len(with_media(items)), 2)

    def test_require_media_and_limit(self):
        self.assertEqual(len(CivicIssueAdapter(require_media=True).normalize(self.BODY, "u")), 2)
        self.assertEqual(len(CivicIssueAdapter(limit=1).normalize(self.BODY, "u")), 1)

    def test_non_list_issues_give_zero_items(self):
        self.assertEqual(CivicIssueAdapter().normalize({"issues": "nope"}, "u"), [])
        self.assertEqual(CivicIssueAdapter().normalize("<html>", "u"), [])

    def test_coordinate_tokens_are_substituted(self):
        url = "https://seeclickfix.com/api/v2/issues?lat={latitude}&lng={longitude}"

        self.assertEqual(
            substitute_coordinates(url, "1.5", "-2.5"),
            "https://seeclickfix.com/api/v2/issues?lat=1.5&lng=-2.5",
        )


class SocialPostAdapterTests(unittest.TestCase):
    def test_json_items_are_unwrapped(self):
        items = SocialPostAdapter().normalize(
            {"items": [{"title": "hi", "content": "body", "link": "https://bsky.app/p/1", "pubDate": "d"}]},
            "https://bsky.app/profile/x",
        )

        self.assertEqual(items[0].description, "body")
        self.assertEqual(items[0].media_url, "https://bsky.app/p/1")
        self.assertEqual(items[0].date, "d")

    def test_rss_body_is_parsed_with_feedparser(self):
        items = SocialPostAdapter().normalize(RSS_BODY, "https://bsky.app/profile/x/rss")

        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].title, "First post")
        self.assertEqual(items[0].media_url, "https://cdn.bsky.app/img/one.jpg")
        self.assertEqual(items[0].media_kind, MediaKind.IMAGE)
        self.assertEqual(items[1].description, "No picture here")
        self.assertEqual(items[1].media_kind, MediaKind.UNKNOWN)


class SpreadsheetAdapterTests(unittest.TestCase):
    def test_csv_rows_become_items(self):
        body = "title,url\nA,http://img/a.jpg\nB,http://img/b.jpg"

        items = SpreadsheetAdapter().normalize(body, "https://docs.google.com/spreadsheets/d/1/gviz/tq?tqx=out:csv")

        self.assertEqual([item.title for item in items], ["A", "B"])
        self.assertEqual([item.media_kind for item in items], [MediaKind.IMAGE, MediaKind.IMAGE])
        self.assertEqual(items[0].source, "Google Sheet")

    def test_quotes_blank_lines_and_short_rows(self):
        rows = parse_csv_rows('"Title","Image","Notes"\r\n"A","https://x/a.jpg"\r\n\r\n')

        self.assertEqual(rows, [{"Title": "A", "Image": "https://x/a.jpg", "Notes": ""}])

    def test_non_text_body_gives_zero_items(self):
        self.assertEqual(SpreadsheetAdapter().normalize({"rows": []}, "u"), [])
        self.assertEqual(SpreadsheetAdapter().normalize("", "u"), [])


class GenericAdapterTests(unittest.TestCase):
    def test_allowlist_projects_fields(self):
        items = GenericAdapter(fields=["title", "url"]).normalize(
            [{"title": "T", "url": "https://x/pic.gif", "secret": "s"}], "https://example.com/feed.json"
        )

        self.assertEqual(items[0].extra, {"title": "T", "url": "https://x/pic.gif"})
        self.assertEqual(items[0].media_kind, MediaKind.IMAGE)
        self.assertEqual(items[0].source, "https://example.com/feed.json")

    def test_passthrough_without_allowlist(self):
        items = GenericAdapter().normalize([{"name": "N", "rank": 3}], "u")

        self.assertEqual(items[0].title, "N")
        self.assertEqual(items[0].get("rank"), 3)

    def test_scalar_body_gives_zero_items(self):
        self.assertEqual(GenericAdapter().normalize(42, "u"), [])


class RegistryTests(unittest.TestCase):
    def test_every_kind_has_an_adapter(self):
        registry = build_registry()

        self.assertEqual(set(registry.kinds()), set(SourceKind))

    def test_labels(self):
        registry = build_registry()

        self.assertEqual(registry.label_for(SourceKind.IMAGE_OF_DAY, "u"), "NASA APOD")
        self.assertEqual(registry.label_for(SourceKind.GENERIC, "https://example.com/a"), "https://example.com/a")

    def test_empty_records_never_raise(self):
        for kind in SourceKind:
            with self.subTest(kind=kind):
                items = normalize_response([{}], kind, "u")
                self.assertTrue(all(item.title == "" for item in items))

    def test_duplicate_registration_is_rejected(self):
        registry = build_registry()

        with self.assertRaises(ValueError):
            registry.register(GenericAdapter())


if __name__ == "__main__":
    unittest.main()
