from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from .browser_session import BrowserSession
from .config import DEFAULT_CONFIG, GeneratorConfig, merge_config
from .dom_extractor import discover_descriptors
from .errors import BrowserError, PogenError
from .metadata_store import PageObjectMetadata
from .models import ElementDescriptor, SemanticCategory
from .page_writer import render_page_object
from .pipeline import resolve_batch


@dataclass(frozen=True, slots=True)
class GenerationResult:
    code: str
    metadata: PageObjectMetadata


class PageObjectGenerator:
    def __init__(
        self,
        config: GeneratorConfig = DEFAULT_CONFIG,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self.config = merge_config(config, overrides)
        self.logger = logging.getLogger("pogen.generator")

    def generate(
        self,
        page_name: str,
        url: str,
        descriptors: Iterable[tuple[ElementDescriptor, SemanticCategory]],
        screenshot_path: str | None = None,
    ) -> GenerationResult:
        batch = resolve_batch(descriptors, self.config)
        metadata = PageObjectMetadata(
            url=url,
            page_name=page_name,
            batch=batch,
            screenshot_path=screenshot_path,
            config=self.config,
        )
        code = render_page_object(page_name, batch, self.config)
        self.logger.info("Generated %s page object with %d element(s)", page_name, len(batch))
        return GenerationResult(code=code, metadata=metadata)

    def generate_from_url(
        self,
        url: str,
        page_name: str,
        screenshot_path: Path | str | None = None,
        extra_roles: Iterable[str] = (),
        session: BrowserSession | None = None,
    ) -> GenerationResult:
        owned = session is None
        active = session or BrowserSession()
        try:
            active.start()
            active.navigate(url)
            descriptors = _discover(active, url, extra_roles)
            saved_screenshot = str(active.screenshot(screenshot_path)) if screenshot_path else None
        finally:
            if owned:
                active.close()
        return self.generate(page_name, url, descriptors, screenshot_path=saved_screenshot)


def _discover(
    session: BrowserSession,
    url: str,
    extra_roles: Iterable[str],
) -> list[tuple[ElementDescriptor, SemanticCategory]]:
    try:
        return discover_descriptors(session.page, extra_roles=extra_roles)
    except PogenError:
        raise
    except Exception as exc:
        raise BrowserError(f"Element discovery failed on {url}: {exc}", url=url) from exc
