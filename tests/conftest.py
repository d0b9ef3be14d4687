import pytest

from html_extractor import compile_spec
from html_extractor.config import ExtractorSettings
from html_extractor.spec_cache import SpecCache


@pytest.fixture
def no_cache_settings():
    return ExtractorSettings(cache_compiled=False)


@pytest.fixture
def compile_fresh(no_cache_settings):
    """compile_spec without the process-wide cache, so every test builds its own classes."""

    def _compile(text, namespace=None, **kwargs):
        return compile_spec(text, namespace, settings=no_cache_settings, **kwargs)

    return _compile


@pytest.fixture
def spec_cache():
    return SpecCache()


@pytest.fixture
def product_html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
    </head>
    <body>
        <h1 class="title">  Walnut Desk  </h1>
        <div class="price" data-price="249.90">$249.90</div>
        <ul class="tags">
            <li class="tag">wood</li>
            <li class="tag">office</li>
            <li class="tag">desk</li>
        </ul>
        <div class="size">120x60 cm</div>
        <div class="in-stock"></div>
        <div id="seller">
            <span class="name">Acme Furniture</span>
            <a class="profile" href="/sellers/acme">profile</a>
        </div>
        <div class="review"><span class="stars">5</span><p class="body">Great desk</p></div>
        <div class="review"><span class="stars">3</span><p class="body">Wobbly</p></div>
    </body>
    </html>
    """


def pytest_collection_modifyitems(config, items):
    """Apply directory-based marks to collected test items."""
    for item in items:
        file_path = str(item.fspath)
        if '/tests/integration/' in file_path:
            item.add_marker(pytest.mark.integration)
        elif '/tests/unit/' in file_path:
            item.add_marker(pytest.mark.unit)
