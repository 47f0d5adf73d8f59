import pytest

from classifieds.collectors.base import DetailPageError, PaginationError
from classifieds.collectors.irr.collector import IrrCollector, trim


def _collector() -> IrrCollector:
    return IrrCollector(base_url="https://irr.test")


def test_listing_items_keep_document_order_and_validity(site):
    html = site.listing_html(1, 2, ["/ad/a.html", "https://irr.test/ad/b.html"], invalid_items=1)
    collector = _collector()
    document = collector.parse(html.encode("utf-8"))

    items = collector.listing_items(document)

    assert [collector.is_valid_item(item) for item in items] == [True, True, False]
    assert collector.detail_url(items[0]) == "https://irr.test/ad/a.html"
    assert collector.detail_url(items[1]) == "https://irr.test/ad/b.html"


def test_detail_url_missing_href_returns_none():
    collector = _collector()
    document = collector.parse(
        b'<div class="listing"><div class="listing__item"><a class="listing__itemTitle">x</a></div></div>'
    )
    item = collector.listing_items(document)[0]
    assert collector.is_valid_item(item) is True
    assert collector.detail_url(item) is None


def test_next_page_url_follows_active_item(site):
    collector = _collector()
    document = collector.parse(site.listing_html(2, 3, []).encode("utf-8"))
    assert collector.next_page_url(document) == "https://irr.test/real-estate/rent/page3/"


def test_next_page_url_is_none_on_last_page(site):
    collector = _collector()
    document = collector.parse(site.listing_html(3, 3, []).encode("utf-8"))
    assert collector.next_page_url(document) is None


def test_missing_active_marker_is_pagination_error():
    collector = _collector()
    document = collector.parse(b'<ul class="pagination"><li class="pagination__pagesItem"></li></ul>')
    with pytest.raises(PaginationError, match="active pagination"):
        collector.next_page_url(document)


def test_next_link_without_href_is_pagination_error():
    collector = _collector()
    document = collector.parse(
        b'<ul class="pagination">'
        b'<li class="pagination__pagesItem pagination__pagesItem_active"><a class="pagination__pagesLink">1</a></li>'
        b'<li class="pagination__pagesItem"><a class="pagination__pagesLink">2</a></li>'
        b"</ul>"
    )
    with pytest.raises(PaginationError, match="next page url"):
        collector.next_page_url(document)


def test_parse_detail_trims_fields(site):
    collector = _collector()
    document = collector.parse(site.detail_html("Сдаю 2-к квартиру", "сегодня, 10:15").encode("utf-8"))

    fields = collector.parse_detail(document)

    assert fields.title == "Сдаю 2-к квартиру"
    assert fields.date_text == "сегодня, 10:15"
    assert fields.address == "Москва, ул. Тверская"


def test_parse_detail_without_title_raises():
    collector = _collector()
    document = collector.parse(
        '<div class="productPage__mainInfo"><span class="productPage__createDate">5 марта</span></div>'.encode("utf-8")
    )
    with pytest.raises(DetailPageError, match="title"):
        collector.parse_detail(document)


def test_trim_strips_unicode_whitespace():
    assert trim("\r\n\t Квартира \n") == "Квартира"
    assert trim("\xa0Квартира\xa0") == "Квартира"


def test_malformed_item_href_has_no_detail_url():
    collector = _collector()
    document = collector.parse(
        b'<div class="listing"><div class="listing__item">'
        b'<a class="listing__itemTitle" href="http://[broken/ad">x</a></div></div>'
    )
    assert collector.detail_url(collector.listing_items(document)[0]) is None


def test_malformed_next_href_is_pagination_error():
    collector = _collector()
    document = collector.parse(
        b'<ul class="pagination">'
        b'<li class="pagination__pagesItem pagination__pagesItem_active"><a class="pagination__pagesLink">1</a></li>'
        b'<li class="pagination__pagesItem"><a class="pagination__pagesLink" href="http://[broken/2">2</a></li>'
        b"</ul>"
    )
    with pytest.raises(PaginationError, match="Invalid next page url"):
        collector.next_page_url(document)


def test_non_breaking_space_title_is_missing(site):
    collector = _collector()
    document = collector.parse(site.detail_html("&nbsp;", "5 марта").encode("utf-8"))
    with pytest.raises(DetailPageError, match="title"):
        collector.parse_detail(document)
