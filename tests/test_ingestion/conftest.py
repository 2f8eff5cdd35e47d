"""Shared fixtures for ingestion tests."""

import pytest

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Engineering</title>
    <link>https://blog.example.com/</link>
    <description>Posts from the example team</description>
    <item>
      <title>Running D1 at scale</title>
      <link>https://blog.example.com/posts/d1-at-scale</link>
      <guid>https://blog.example.com/posts/d1-at-scale</guid>
      <description>&lt;p&gt;I love &lt;b&gt;D1&lt;/b&gt;&lt;/p&gt;&lt;p&gt;Really.&lt;/p&gt;</description>
      <dc:creator>Jane Doe</dc:creator>
      <pubDate>Wed, 21 Jan 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Older post</title>
      <link>https://blog.example.com/posts/older</link>
      <guid>https://blog.example.com/posts/older</guid>
      <description>Plain summary</description>
      <pubDate>Tue, 20 Jan 2026 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <subtitle>An Atom feed</subtitle>
  <updated>2026-01-21T08:00:00Z</updated>
  <id>urn:uuid:feed</id>
  <entry>
    <id>urn:uuid:entry-1</id>
    <title>Atom post</title>
    <link href="https://atom.example.com/a1"/>
    <published>2026-01-21T08:00:00Z</published>
    <updated>2026-01-21T09:00:00Z</updated>
    <author><name>Sam</name></author>
    <summary>Short summary</summary>
    <content type="html">&lt;p&gt;Full body&lt;/p&gt;</content>
  </entry>
</feed>
"""

EMPTY_RSS_FEED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Empty</title></channel></rss>
"""


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def empty_rss_feed() -> bytes:
    return EMPTY_RSS_FEED
