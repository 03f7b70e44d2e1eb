"""
Public share page for a walk, carrying Open Graph and Twitter card tags.
"""
from html import escape

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from api.routes.walks import walks_repo
from db import SessionLocal
from domain.models import MediaType
from services.remote_images import maybe_proxy_url
from services.share_card import share_description, share_title

router = APIRouter()

PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<meta name="description" content="{description}">
<meta property="og:type" content="website">
<meta property="og:title" content="{title}">
<meta property="og:description" content="{description}">
<meta property="og:url" content="{url}">
<meta property="og:image" content="{image}">
<meta name="twitter:card" content="summary_large_image">
<meta name="twitter:title" content="{title}">
<meta name="twitter:description" content="{description}">
<meta name="twitter:image" content="{image}">
</head>
<body>
<h1>{title}</h1>
<p>{description}</p>
{body}
</body>
</html>
"""


@router.get("/walk/{walk_id}", response_class=HTMLResponse)
async def share_page(walk_id: str):
    with SessionLocal() as session:
        walk = walks_repo.get_walk(session, walk_id)

    if walk is None:
        body = "<p>Walk not found.</p>"
        status_code = 404
    else:
        recap = walk.recap_image_url or f"/walks/{walk_id}/recap-image"
        items = [f'<img src="{escape(recap)}" alt="Walk recap">']
        for m in walk.media:
            src = escape(maybe_proxy_url(m.url))
            if m.type == MediaType.VIDEO:
                items.append(f'<video src="{src}" controls></video>')
            else:
                items.append(f'<img src="{src}" alt="{escape(m.name)}">')
        if walk.notes:
            items.append(f"<p>{escape(walk.notes)}</p>")
        body = "\n".join(items)
        status_code = 200

    html = PAGE_TEMPLATE.format(
        title=escape(share_title(walk)),
        description=escape(share_description(walk)),
        url=escape(f"/walk/{walk_id}"),
        image=escape(f"/walks/{walk_id}/opengraph-image"),
        body=body,
    )
    return HTMLResponse(content=html, status_code=status_code)
