# app/services/cms/asset_urls.py
#
# Maps stored asset references to public CDN URLs. No network access.

import re

CDN_BASE = "https://cdn.sanity.io"

# image-<id>-<width>x<height>-<ext>
_IMAGE_REF = re.compile(r"^image-(?P<id>[A-Za-z0-9]+)-(?P<dims>\d+x\d+)-(?P<ext>[a-z0-9]+)$")

# file-<id>-<ext>
_FILE_REF = re.compile(r"^file-(?P<id>[A-Za-z0-9]+)-(?P<ext>[a-z0-9]+)$")


def image_url_for(ref: str, project_id: str, dataset: str) -> str:
    match = _IMAGE_REF.match(ref)

    if not match:
        raise ValueError(f"Malformed image reference: {ref}")

    return (
        f"{CDN_BASE}/images/{project_id}/{dataset}/"
        f"{match['id']}-{match['dims']}.{match['ext']}"
    )


def file_url_for(ref: str, project_id: str, dataset: str) -> str:
    match = _FILE_REF.match(ref)

    if not match:
        raise ValueError(f"Malformed file reference: {ref}")

    return f"{CDN_BASE}/files/{project_id}/{dataset}/{match['id']}.{match['ext']}"
