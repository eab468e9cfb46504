"""Caller-declared custom fields at feed and item scope."""
import pytest

from rss_canon import ConfigurationError, FeedParser, FieldRule, ParserOptions
from rss_canon.custom_fields import compile_rule, compile_rules


CUSTOM_FIELDS_EXAMPLE = """
      <?xml version="1.0" encoding="UTF-8"?>
      <rss xmlns:content="http://purl.org/rss/1.0/modules/content/" xmlns:dc="http://purl.org/dc/elements/1.1/" version="2.0">
        <channel>
          <thing>Instant Article Test 2</thing>
          <item>
            <title>My second Instant Article</title>
            <link>https://example.com/my-second-article</link>
          </item>
        </channel>
      </rss>
    """

NESTED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Custom</title>
    <language>en-us</language>
    <copyright>Example Corp</copyright>
    <nested-field>
      <subfield>foo</subfield>
      <subfield>bar</subfield>
    </nested-field>
    <item>
      <title>Item</title>
      <subtitle>A subtitle</subtitle>
      <media:group>
        <media:title>Clip</media:title>
        <media:content url="https://example.com/clip.mp4"/>
      </media:group>
    </item>
  </channel>
</rss>
"""


class TestCompileRule:
    def test_plain_name(self):
        assert compile_rule("language") == FieldRule(source="language", dest="language")

    def test_rename(self):
        assert compile_rule(["title", "customName"]) == FieldRule(source="title", dest="customName")

    def test_keep_array_triple(self):
        rule = compile_rule(("media:content", "media", {"keep_array": True}))
        assert rule.keep_array is True
        assert compile_rule(("media:content", "media", {"keepArray": True})).keep_array is True

    def test_nested_path(self):
        assert compile_rule("media:group/media:title").path == ("media:group", "media:title")

    @pytest.mark.parametrize("bad", [
        "",
        42,
        ("title",) * 4,
        ("title", ""),
        ("title", "t", {"unknown": True}),
        ("title", "t", "keep_array"),
    ])
    def test_invalid_rules_rejected(self, bad):
        with pytest.raises(ConfigurationError):
            compile_rule(bad)

    def test_string_instead_of_list_rejected(self):
        with pytest.raises(ConfigurationError):
            compile_rules("title")


class TestInjection:
    def test_rename_example(self):
        parser = FeedParser(custom_fields={"feed": ["thing"], "item": [["title", "customName"]]})
        feed = parser.parse_string(CUSTOM_FIELDS_EXAMPLE)
        assert feed["thing"] == "Instant Article Test 2"
        assert feed == {
            "thing": "Instant Article Test 2",
            "items": [
                {
                    "title": "My second Instant Article",
                    "customName": "My second Instant Article",
                    "link": "https://example.com/my-second-article",
                }
            ],
        }

    def test_feed_and_item_fields(self):
        parser = FeedParser(custom_fields={
            "feed": ["language", "copyright", "nested-field"],
            "item": ["subtitle"],
        })
        feed = parser.parse_string(NESTED)
        assert feed["language"] == "en-us"
        assert feed["copyright"] == "Example Corp"
        assert feed["nested-field"] == {"subfield": ["foo", "bar"]}
        assert feed["items"][0]["subtitle"] == "A subtitle"

    def test_complex_element_kept_as_structure(self):
        parser = FeedParser(custom_fields={"item": ["media:group"]})
        item = parser.parse_string(NESTED)["items"][0]
        assert item["media:group"] == {
            "media:title": ["Clip"],
            "media:content": [{"$": {"url": "https://example.com/clip.mp4"}}],
        }

    def test_nested_path_rule(self):
        parser = FeedParser(custom_fields={"item": [("media:group/media:title", "clipTitle")]})
        item = parser.parse_string(NESTED)["items"][0]
        assert item["clipTitle"] == "Clip"

    def test_sibling_fields_keep_array(self, fixture_text):
        parser = FeedParser(custom_fields={
            "item": [["media:content", "media:content", {"keep_array": True}]],
        })
        items = parser.parse_string(fixture_text("guardian.rss"))["items"]
        assert items[0]["media:content"] == [
            {"$": {"width": "140", "url": "https://i.guim.co.uk/1-140.jpg"}},
            {"$": {"width": "460", "url": "https://i.guim.co.uk/1-460.jpg"}},
        ]
        # a single match is still a list
        assert items[1]["media:content"] == [
            {"$": {"width": "140", "url": "https://i.guim.co.uk/2-140.jpg"}},
        ]
        assert "media:content" not in items[2]

    def test_sibling_fields_first_match_without_keep_array(self, fixture_text):
        parser = FeedParser(custom_fields={"item": ["media:content"]})
        items = parser.parse_string(fixture_text("guardian.rss"))["items"]
        assert items[0]["media:content"] == {"$": {"width": "140", "url": "https://i.guim.co.uk/1-140.jpg"}}

    def test_media_content_fills_enclosure(self, parser, fixture_text):
        items = parser.parse_string(fixture_text("guardian.rss"))["items"]
        assert items[0]["enclosure"] == {"url": "https://i.guim.co.uk/1-140.jpg"}
        assert "enclosure" not in items[2]

    def test_unmatched_rule_adds_no_key(self, fixture_text):
        parser = FeedParser(custom_fields={
            "feed": ["nothing-here"],
            "item": [("missing", "renamed"), ("absent", "listed", {"keep_array": True})],
        })
        feed = parser.parse_string(fixture_text("guardian.rss"))
        assert "nothing-here" not in feed
        for item in feed["items"]:
            assert "renamed" not in item
            assert "listed" not in item

    def test_custom_field_takes_last_write(self, fixture_text):
        parser = FeedParser(custom_fields={"item": [("guid", "title")]})
        item = parser.parse_string(fixture_text("instant-article.rss"))["items"][0]
        assert item["title"] == "eb4a43a9-0e30-446a-b92e-de65966d5a1a"

    def test_atom_custom_fields(self, fixture_text):
        parser = FeedParser(custom_fields={"feed": ["id"], "item": [("link", "links", {"keep_array": True})]})
        feed = parser.parse_string(fixture_text("gulp.atom"))
        assert feed["id"] == "tag:github.com,2008:https://github.com/gulpjs/gulp/releases"
        assert [l["$"]["href"] for l in feed["items"][0]["links"]] == [
            "https://github.com/gulpjs/gulp/releases/tag/v3.9.1",
            "https://example.com/related",
        ]


class TestOptions:
    def test_from_dict_accepts_camel_case(self):
        options = ParserOptions.from_dict({
            "customFields": {"item": [["media:content", "media", {"keepArray": True}]]},
            "defaultRSS": 2,
        })
        assert options.custom_fields.item == (FieldRule("media:content", "media", keep_array=True),)
        assert options.default_rss == 2

    def test_unknown_option_rejected(self):
        with pytest.raises(ConfigurationError):
            ParserOptions.from_dict({"headers": {}})

    def test_unknown_scope_rejected(self):
        with pytest.raises(ConfigurationError):
            FeedParser(custom_fields={"entry": ["title"]})

    def test_bad_default_rss_rejected(self):
        with pytest.raises(ConfigurationError, match="default RSS version not recognized"):
            FeedParser(default_rss=3)

    def test_options_instance(self):
        options = ParserOptions(custom_fields={"feed": ["thing"]})
        parser = FeedParser(options=options)
        assert parser.options is options
        assert parser.parse_string(CUSTOM_FIELDS_EXAMPLE)["thing"] == "Instant Article Test 2"
