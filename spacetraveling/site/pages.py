"""HTML rendering for the listing and post pages.

Plain f-string markup, no template engine. Every CMS value is escaped
before it reaches the page.
"""

from __future__ import annotations

from html import escape
from typing import Optional
from urllib.parse import quote

from ..blog.formatting import (
    DEFAULT_LOCALE,
    DEFAULT_MISSING_DATE,
    format_publication_date,
    format_reading_time,
)
from ..prismic.models import Post, PostData, PostPagination
from ..prismic.richtext import as_html

SITE_NAME = "spacetraveling"


# =============================================================================
# CSS Styles
# =============================================================================

CSS_STYLES = """
:root {
  --background: #1a1d23;
  --heading: #f8f8f8;
  --body: #d7d7d7;
  --info: #bbbbbb;
  --highlight: #ff57b2;
}

* { box-sizing: border-box; margin: 0; padding: 0; }

body {
  font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
  background: var(--background);
  color: var(--body);
  line-height: 1.6;
}

a { color: inherit; text-decoration: none; }

.container { max-width: 720px; margin: 0 auto; padding: 0 1rem; }
.header { padding: 4rem 0 3rem; }
.header .logo { font-size: 1.5rem; font-weight: 700; color: var(--heading); }
.header .logo span { color: var(--highlight); }

.posts a { display: block; margin-bottom: 3rem; }
.posts h1 { font-size: 1.75rem; color: var(--heading); }
.posts h3 { font-weight: 400; margin: 0.5rem 0 1.5rem; }

.post-footer { display: flex; gap: 1.5rem; color: var(--info); font-size: 0.875rem; }

.load-more {
  background: none;
  border: 0;
  color: var(--highlight);
  font-size: 1.125rem;
  font-weight: 600;
  cursor: pointer;
  margin-bottom: 4rem;
}
.load-more:disabled { opacity: 0.5; cursor: wait; }
.load-error { color: var(--highlight); margin-bottom: 2rem; }

.banner img { width: 100%; max-height: 400px; object-fit: cover; }
.post { padding: 4rem 0; }
.post > h1 { font-size: 3rem; color: var(--heading); }
.post .post-footer { margin: 1.5rem 0 4rem; }
.section { margin-bottom: 4rem; }
.section strong.subtitle { display: block; font-size: 2.25rem; color: var(--heading); margin-bottom: 2rem; }
.section p, .section li, .section pre { margin-bottom: 1.5rem; }
.section img { max-width: 100%; }

.loading { padding: 4rem 0; text-align: center; }
"""


# =============================================================================
# JavaScript
# =============================================================================

JS_SCRIPTS = """
// One request at a time: the button stays disabled while a page loads.
function formatDate(value, missing, locale) {
  if (!value) return missing;
  return new Intl.DateTimeFormat(locale || 'pt-BR', {
    day: '2-digit', month: 'short', year: 'numeric'
  }).format(new Date(value));
}

function renderPost(post, missing, locale) {
  const data = post.data || {};
  const link = document.createElement('a');
  link.href = post.href || ('/post/' + encodeURIComponent(post.uid || ''));

  const title = document.createElement('h1');
  title.textContent = data.title || '';
  const subtitle = document.createElement('h3');
  subtitle.textContent = data.subtitle || '';

  const footer = document.createElement('div');
  footer.className = 'post-footer';
  const time = document.createElement('time');
  time.textContent = post.date_label || formatDate(post.first_publication_date, missing, locale);
  const author = document.createElement('p');
  author.textContent = data.author || '';
  footer.append(time, author);

  link.append(title, subtitle, footer);
  return link;
}

async function loadMorePosts(button) {
  if (button.disabled) return;

  const list = document.getElementById('posts');
  const errorBox = document.getElementById('load-error');
  const cursor = button.dataset.cursor;
  const api = button.dataset.api;
  const url = api ? api + '?cursor=' + encodeURIComponent(cursor) : cursor;

  button.disabled = true;
  errorBox.textContent = '';
  try {
    const response = await fetch(url);
    if (!response.ok) throw new Error('HTTP ' + response.status);
    const page = await response.json();
    page.results.forEach(post => list.appendChild(renderPost(post, button.dataset.missingDate, button.dataset.locale)));
    if (page.next_page) {
      button.dataset.cursor = page.next_page;
    } else {
      button.remove();
    }
  } catch (err) {
    errorBox.textContent = 'Não foi possível carregar mais posts. Tente novamente.';
  } finally {
    button.disabled = false;
  }
}
"""


# =============================================================================
# HTML Rendering
# =============================================================================

def render_layout(
    title: str,
    body: str,
    include_script: bool = False,
    refresh_seconds: Optional[int] = None,
) -> str:
    """Wrap a page body in the shared document shell and header."""
    refresh = (
        f'<meta http-equiv="refresh" content="{refresh_seconds}">'
        if refresh_seconds is not None
        else ""
    )
    script = f"<script>{JS_SCRIPTS}</script>" if include_script else ""
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  {refresh}
  <title>{escape(title)} | {SITE_NAME}</title>
  <style>{CSS_STYLES}</style>
</head>
<body>
  <header class="header container">
    <a href="/" class="logo">{SITE_NAME}<span>.</span></a>
  </header>
  {body}
  {script}
</body>
</html>"""


def post_href(post: Post) -> str:
    return f"/post/{quote(post.uid or '')}"


def render_post_item(
    post: Post,
    locale: str = DEFAULT_LOCALE,
    missing_date: str = DEFAULT_MISSING_DATE,
) -> str:
    """One listing entry: title, subtitle, date and author, linked to the post."""
    data = post.data or PostData()
    date_label = format_publication_date(
        post.first_publication_date, locale=locale, missing=missing_date
    )
    return f"""
    <a href="{escape(post_href(post), quote=True)}">
      <h1>{escape(data.title or "")}</h1>
      <h3>{escape(data.subtitle or "")}</h3>
      <div class="post-footer">
        <time>{escape(date_label)}</time>
        <p>{escape(data.author or "")}</p>
      </div>
    </a>"""


def html_locale(locale: str) -> str:
    """BCP 47 tag for a babel locale identifier (pt_BR -> pt-BR)."""
    return locale.replace("_", "-")


def render_home(
    pagination: PostPagination,
    locale: str = DEFAULT_LOCALE,
    missing_date: str = DEFAULT_MISSING_DATE,
    load_more_api: Optional[str] = "/api/posts/next",
) -> str:
    """Listing page.

    Args:
        pagination: First page of posts.
        locale: Locale for publication dates.
        missing_date: Placeholder for unpublished posts.
        load_more_api: Server endpoint proxying cursor fetches. None makes
            the browser follow the cursor directly (static export).
    """
    items = "".join(
        render_post_item(post, locale=locale, missing_date=missing_date)
        for post in pagination.results
    )

    button = ""
    if pagination.next_page is not None:
        api_attr = f' data-api="{escape(load_more_api, quote=True)}"' if load_more_api else ""
        button = f"""
    <button type="button" class="load-more"
            data-cursor="{escape(pagination.next_page, quote=True)}"{api_attr}
            data-missing-date="{escape(missing_date, quote=True)}"
            data-locale="{escape(html_locale(locale), quote=True)}"
            onclick="loadMorePosts(this)">
      Carregar mais posts
    </button>"""

    body = f"""
  <main class="container">
    <div class="posts" id="posts">{items}</div>
    <div class="load-error" id="load-error" role="alert"></div>{button}
  </main>"""
    return render_layout("Home", body, include_script=pagination.next_page is not None)


def render_post(
    post: Post,
    minutes: int,
    locale: str = DEFAULT_LOCALE,
    missing_date: str = DEFAULT_MISSING_DATE,
) -> str:
    """Post page: banner, title, date, author, reading time, then sections."""
    data = post.data or PostData()
    date_label = format_publication_date(
        post.first_publication_date, locale=locale, missing=missing_date
    )

    banner = ""
    if data.banner and data.banner.url:
        banner = f"""
  <div class="banner">
    <img src="{escape(data.banner.url, quote=True)}" alt="banner">
  </div>"""

    sections = "".join(
        f"""
    <div class="section">
      <strong class="subtitle">{escape(section.heading or "")}</strong>
      {as_html(section.body)}
    </div>"""
        for section in data.content or []
    )

    body = f"""{banner}
  <main class="post container">
    <h1>{escape(data.title or "")}</h1>
    <div class="post-footer">
      <time>{escape(date_label)}</time>
      <p>{escape(data.author or "")}</p>
      <p>{format_reading_time(minutes)}</p>
    </div>
    {sections}
  </main>"""
    return render_layout("Post", body)


def render_loading(refresh_seconds: int = 1) -> str:
    """Placeholder shown while a post page is generated on demand."""
    body = """
  <main class="loading container">
    <h1>Carregando...</h1>
  </main>"""
    return render_layout("Post", body, refresh_seconds=refresh_seconds)


def post_summary(
    post: Post,
    locale: str = DEFAULT_LOCALE,
    missing_date: str = DEFAULT_MISSING_DATE,
) -> dict:
    """JSON shape of a listing entry for the load-more endpoint."""
    return {
        **post.model_dump(mode="json", exclude_none=True),
        "href": post_href(post),
        "date_label": format_publication_date(
            post.first_publication_date, locale=locale, missing=missing_date
        ),
    }
