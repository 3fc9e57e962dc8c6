# File: tests/test_crawler.py
# Test-suite for the SiteHarvest breadth-first domain crawler
from __future__ import annotations

import re
import time

import pytest

import site_harvest.crawler.crawler as crawler_module
from site_harvest.config import CrawlOptions
from site_harvest.crawler.crawler import DomainCrawler
from site_harvest.domain import is_same_domain
from site_harvest.engine import Engine, start_crawl
from site_harvest.errors import InvalidSeedURL, PageFetchError
from site_harvest.models import CrawlResult, SinglePageResult

PNG_A = b"\x89PNG\r\n\x1a\nAAAA"
PNG_B = b"\x89PNG\r\n\x1a\nBBBBBBBB"


def page_urls(result: CrawlResult) -> list[str]:
    return [p.url for p in result.pages]


async def run_crawl(base: str, options) -> CrawlResult:
    async with DomainCrawler(f"{base}/", options) as crawler:
        return await crawler.crawl()


# --------------------------------------------------------------------------- #
#                              Traversal order                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_pages_are_emitted_breadth_first(serve, make_options):
    base = await serve({
        "/": '<a href="/a">A</a><a href="/b">B</a>',
        "/a": '<a href="/a1">A1</a>',
        "/b": '<a href="/b1">B1</a>',
        "/a1": "<h1>A1</h1>",
        "/b1": "<h1>B1</h1>",
    })
    result = await run_crawl(base, make_options(max_depth=2))

    assert page_urls(result) == [f"{base}/", f"{base}/a", f"{base}/b", f"{base}/a1", f"{base}/b1"]
    assert result.pages_count == 5


@pytest.mark.asyncio()
async def test_depth_limit(serve, make_options, hits):
    base = await serve({
        "/": '<a href="/a">A</a>',
        "/a": '<a href="/a1">A1</a>',
        "/a1": "<p>too deep</p>",
    })
    result = await run_crawl(base, make_options(max_depth=1))

    assert page_urls(result) == [f"{base}/", f"{base}/a"]
    assert hits["/a1"] == 0


@pytest.mark.asyncio()
async def test_depth_zero_fetches_only_seed(serve, make_options):
    base = await serve({"/": '<a href="/a">A</a>', "/a": "<p>A</p>"})
    result = await run_crawl(base, make_options(max_depth=0))

    assert page_urls(result) == [f"{base}/"]


# --------------------------------------------------------------------------- #
#                                 Bounds                                       #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_max_pages_one_returns_only_seed(serve, make_options, hits):
    links = "".join(f'<a href="/page{i}">P{i}</a>' for i in range(20))
    routes = {"/": links, **{f"/page{i}": "<p>page</p>" for i in range(20)}}
    base = await serve(routes)

    result = await run_crawl(base, make_options(max_pages=1))

    assert page_urls(result) == [f"{base}/"]
    assert result.visited_urls == [f"{base}/"]
    assert sum(hits[f"/page{i}"] for i in range(20)) == 0


@pytest.mark.asyncio()
async def test_page_bound_holds_for_large_frontier(serve, make_options):
    links = "".join(f'<a href="/page{i}">P{i}</a>' for i in range(20))
    routes = {"/": links, **{f"/page{i}": "<p>page</p>" for i in range(20)}}
    base = await serve(routes)

    result = await run_crawl(base, make_options(max_pages=4))

    assert page_urls(result) == [f"{base}/", f"{base}/page0", f"{base}/page1", f"{base}/page2"]


# --------------------------------------------------------------------------- #
#                          Scoping & deduplication                             #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_off_domain_links_are_not_enqueued(serve, make_options):
    base = await serve({
        "/": '<a href="/about">About</a><a href="https://other.test/x">Ext</a>',
        "/about": "<h1>About</h1>",
    })
    async with DomainCrawler(f"{base}/", make_options(max_depth=1, max_pages=10)) as crawler:
        enqueued: list[str] = []
        original = crawler._enqueue

        def spy(urls, depth, *kind):
            before = len(crawler.frontier)
            original(urls, depth, *kind)
            enqueued.extend(e.url for e in list(crawler.frontier)[before:])

        crawler._enqueue = spy
        result = await crawler.crawl()

    assert f"{base}/about" in enqueued
    assert "https://other.test/x" not in enqueued
    assert all(is_same_domain(u, "127.0.0.1") for u in enqueued)
    assert "https://other.test/x" in result.pages[0].links
    assert page_urls(result) == [f"{base}/", f"{base}/about"]


@pytest.mark.asyncio()
async def test_url_reached_twice_is_fetched_once(serve, make_options, hits):
    base = await serve({
        "/": '<a href="/a">A</a><a href="/b">B</a>',
        "/a": '<a href="/c">C</a>',
        "/b": '<a href="/c">C</a><a href="/">home</a>',
        "/c": "<p>C</p>",
    })
    result = await run_crawl(base, make_options(max_depth=3))

    urls = page_urls(result)
    assert len(urls) == len(set(urls)) == 4
    assert hits["/c"] == 1
    assert hits["/"] == 1


@pytest.mark.asyncio()
async def test_seed_without_path_is_normalised(serve, make_options, hits):
    base = await serve({"/": '<a href="/">self</a>'})
    async with DomainCrawler(base, make_options()) as crawler:
        result = await crawler.crawl()

    assert page_urls(result) == [f"{base}/"]
    assert hits["/"] == 1


# --------------------------------------------------------------------------- #
#                               Failures                                       #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_404_page_is_visited_but_not_recorded(serve, make_options):
    base = await serve({
        "/": '<a href="/missing">Broken</a><a href="/ok">OK</a>',
        "/ok": "<p>fine</p>",
    })
    result = await run_crawl(base, make_options())

    assert f"{base}/missing" in result.visited_urls
    assert f"{base}/missing" not in page_urls(result)
    assert f"{base}/ok" in page_urls(result)


@pytest.mark.asyncio()
async def test_unexpected_error_abandons_only_that_entry(serve, make_options, monkeypatch):
    real_to_markdown = crawler_module.to_markdown

    def exploding(html: str) -> str:
        if "boom" in html:
            raise RuntimeError("parser crashed")
        return real_to_markdown(html)

    monkeypatch.setattr(crawler_module, "to_markdown", exploding)
    base = await serve({
        "/": '<a href="/bad">bad</a><a href="/good">good</a>',
        "/bad": "<p>boom</p>",
        "/good": "<p>good</p>",
    })
    result = await run_crawl(base, make_options())

    assert page_urls(result) == [f"{base}/", f"{base}/good"]
    assert f"{base}/bad" in result.visited_urls


def test_invalid_seed_is_rejected_before_any_request():
    with pytest.raises(InvalidSeedURL):
        DomainCrawler("not a url")


@pytest.mark.asyncio()
async def test_delay_is_applied_between_requests(serve, make_options):
    base = await serve({"/": '<a href="/a">A</a><a href="/b">B</a>', "/a": "a", "/b": "b"})
    start = time.perf_counter()
    result = await run_crawl(base, make_options(delay=100))
    elapsed = time.perf_counter() - start

    assert result.pages_count == 3
    # two pauses: none after the last page
    assert elapsed >= 0.2


@pytest.mark.asyncio()
async def test_no_delay_after_final_page(serve, make_options):
    base = await serve({"/": '<a href="/a">A</a>', "/a": "a"})
    start = time.perf_counter()
    result = await run_crawl(base, make_options(delay=2000, max_pages=1))
    elapsed = time.perf_counter() - start

    assert result.pages_count == 1
    assert elapsed < 1.5


# --------------------------------------------------------------------------- #
#                               Downloads                                      #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_same_basename_images_do_not_overwrite(serve, make_options, download_root):
    base = await serve({
        "/": '<img src="/a/logo.png"><img src="/b/logo.png">',
        "/a/logo.png": (PNG_A, "image/png"),
        "/b/logo.png": (PNG_B, "image/png"),
    })
    result = await run_crawl(base, make_options())

    images_dir = download_root / "127.0.0.1" / "images"
    assert sorted(p.name for p in images_dir.iterdir()) == ["logo.png", "logo_1.png"]
    assert (images_dir / "logo.png").read_bytes() == PNG_A
    assert (images_dir / "logo_1.png").read_bytes() == PNG_B
    assert [a.local_path for a in result.downloads.images] == [
        "127.0.0.1/images/logo.png",
        "127.0.0.1/images/logo_1.png",
    ]
    assert [a.original_url for a in result.pages[0].downloaded_images] == [
        f"{base}/a/logo.png",
        f"{base}/b/logo.png",
    ]


@pytest.mark.asyncio()
async def test_download_images_disabled(serve, make_options, download_root, hits):
    base = await serve({
        "/": '<img src="/a.png"><img src="/b.png"><a href="/next">next</a>',
        "/next": '<img src="/a.png">',
        "/a.png": (PNG_A, "image/png"),
        "/b.png": (PNG_B, "image/png"),
    })
    result = await run_crawl(base, make_options(download_images=False))

    assert result.downloads.images == []
    assert all(p.downloaded_images == [] for p in result.pages)
    assert hits["/a.png"] == hits["/b.png"] == 0
    assert not (download_root / "127.0.0.1" / "images").exists()


@pytest.mark.asyncio()
async def test_shared_asset_is_downloaded_once(serve, make_options, hits):
    base = await serve({
        "/": '<img src="/shared.png"><a href="/other">other</a>',
        "/other": '<img src="/shared.png">',
        "/shared.png": (PNG_A, "image/png"),
    })
    result = await run_crawl(base, make_options())

    assert hits["/shared.png"] == 1
    assert [a.original_url for a in result.downloads.images] == [f"{base}/shared.png"]
    assert f"{base}/shared.png" in result.visited_urls
    assert result.pages[1].downloaded_images == []


@pytest.mark.asyncio()
async def test_files_are_categorised_and_counted(serve, make_options, download_root):
    base = await serve({
        "/": (
            '<link rel="stylesheet" href="/style.css">'
            '<a href="/report.pdf">PDF</a>'
            '<video src="/clip.mp4"></video>'
            '<img src="/pic.gif">'
        ),
        "/style.css": (b"body{}", "text/css"),
        "/report.pdf": (b"%PDF-1.4 data", "application/pdf"),
        "/clip.mp4": (b"\x00\x00\x00\x18ftyp", "video/mp4"),
        "/pic.gif": (b"GIF89a", "image/gif"),
    })
    result = await run_crawl(base, make_options())

    stats = result.downloads.stats
    assert stats.total_images == 1
    assert stats.total_files == 3
    assert stats.files_by_category == {"other": 1, "documents": 1, "videos": 1}
    assert stats.total_size == len(b"body{}") + len(b"%PDF-1.4 data") + len(b"\x00\x00\x00\x18ftyp") + len(b"GIF89a")
    assert (download_root / "127.0.0.1" / "documents" / "report.pdf").is_file()
    assert (download_root / "127.0.0.1" / "videos" / "clip.mp4").is_file()
    assert (download_root / "127.0.0.1" / "other" / "style.css").is_file()


@pytest.mark.asyncio()
async def test_asset_entries_are_never_expanded(serve, make_options, hits):
    base = await serve({
        "/": '<a href="/doc.pdf">doc</a>',
        # served as HTML on purpose: even so it must not be parsed for links
        "/doc.pdf": '<a href="/secret">secret</a>',
        "/secret": "<p>secret</p>",
    })
    result = await run_crawl(base, make_options(download_files=False))

    assert page_urls(result) == [f"{base}/"]
    assert f"{base}/doc.pdf" in result.visited_urls
    assert hits["/doc.pdf"] == 0
    assert hits["/secret"] == 0


@pytest.mark.asyncio()
async def test_extensionless_image_is_downloaded_not_crawled(serve, make_options, download_root, hits):
    base = await serve({
        "/": '<img src="/avatar?id=1">',
        "/avatar": (PNG_A, "image/png"),
    })
    result = await run_crawl(base, make_options(download_images=True, download_files=False))

    assert page_urls(result) == [f"{base}/"]
    assert len(result.downloads.images) == 1
    assert result.downloads.files == []
    asset = result.downloads.images[0]
    assert asset.original_url == f"{base}/avatar?id=1"
    assert asset.category == "images"
    assert re.fullmatch(r"127\.0\.0\.1/images/file_\d+\.png", asset.local_path)
    assert (download_root / asset.local_path).read_bytes() == PNG_A
    assert hits["/avatar"] == 1


@pytest.mark.asyncio()
async def test_extensionless_media_never_becomes_a_page(serve, make_options):
    base = await serve({
        "/": '<video src="/stream"></video><a href="/next">next</a>',
        "/stream": (b"\x00\x00\x00\x18ftyp", "video/mp4"),
        "/next": "<p>next</p>",
    })
    # per-page downloads capped at zero: /stream is reached only through the frontier
    result = await run_crawl(base, make_options(max_files_per_page=0))

    assert page_urls(result) == [f"{base}/", f"{base}/next"]
    assert [a.original_url for a in result.downloads.files] == [f"{base}/stream"]
    assert result.downloads.images == []


@pytest.mark.asyncio()
async def test_failed_download_does_not_abort_crawl(serve, make_options):
    base = await serve({
        "/": '<img src="/gone.png"><a href="/next">next</a>',
        "/next": "<p>next</p>",
    })
    result = await run_crawl(base, make_options())

    assert page_urls(result) == [f"{base}/", f"{base}/next"]
    assert result.downloads.images == []


# --------------------------------------------------------------------------- #
#                            Single-page mode                                  #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_single_page_mode_returns_page_and_metadata(serve, make_options):
    images = "".join(f'<img src="/img{i}.png">' for i in range(12))
    base = await serve({
        "/": (
            "<html><head><title> Example </title>"
            '<meta name="description" content="An example page">'
            '<meta name="keywords" content="a, b"></head>'
            f"<body><h1>Welcome</h1><p>Hello</p>{images}<a href='/next'>n</a></body></html>"
        ),
        "/next": "<p>not fetched</p>",
    })
    result = await start_crawl(f"{base}/", make_options(recursive=False, download_images=False))

    assert isinstance(result, SinglePageResult)
    assert result.metadata.url == f"{base}/"
    assert result.metadata.title == "Example"
    assert result.metadata.description == "An example page"
    assert result.metadata.keywords == "a, b"
    assert len(result.metadata.images) == 10
    assert "# Welcome" in result.page.markdown
    assert result.page.links == [f"{base}/next"]


@pytest.mark.asyncio()
async def test_single_page_mode_raises_on_fetch_failure(serve, make_options):
    base = await serve({"/": "<p>home</p>"})
    with pytest.raises(PageFetchError):
        await start_crawl(f"{base}/missing", make_options(recursive=False))


@pytest.mark.asyncio()
async def test_start_crawl_accepts_camel_case_mapping(serve, download_root):
    base = await serve({"/": '<a href="/a">A</a>', "/a": "<p>A</p>"})
    result = await start_crawl(
        f"{base}/",
        {"recursive": True, "maxPages": 1, "delay": 0, "downloadDir": str(download_root)},
    )

    assert isinstance(result, CrawlResult)
    assert result.pages_count == 1


def test_engine_run_propagates_crawl_errors():
    engine = Engine(CrawlOptions(recursive=True))
    with pytest.raises(InvalidSeedURL):
        engine.run("not a url")


def test_engine_load_config(tmp_path):
    cfg_path = tmp_path / "crawl.yaml"
    cfg_path.write_text("recursive: true\nmaxPages: 3\n", encoding="utf-8")
    opts = Engine.load_config(str(cfg_path))
    assert Engine(opts).options.max_pages == 3
