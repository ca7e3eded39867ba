"""Rich card rendering for transcripts."""

from typing import Optional

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from hive_chat.codec import is_image_file
from hive_chat.models.content import FileRef, IndexedDbRef, LocationRef, PlainText, VoiceRef
from hive_chat.render import BlobSource, MessageView


def to_renderable(view: MessageView, blob_store: Optional[BlobSource] = None) -> Panel:
    content = view.content
    body = []
    if isinstance(content, PlainText):
        body.append(Text(content.body))
    elif isinstance(content, VoiceRef):
        body.append(Text(f"\U0001F3A4 Voice message ({content.duration_label})", style="bold"))
        if blob_store is not None:
            body.append(Text(blob_store.url_for(content.blob_id), style="dim"))
    elif isinstance(content, LocationRef):
        body.append(Text(f"\U0001F4CD {content.lat}, {content.lng}", style="bold"))
        if content.label:
            body.append(Text(content.label))
        body.append(Text(
            f"https://www.openstreetmap.org/?mlat={content.lat}&mlon={content.lng}#map=16/{content.lat}/{content.lng}",
            style="dim",
        ))
    else:
        size = getattr(content, "human_size", None)
        kind = "image" if is_image_file(content.file_name) else "file"
        header = f"\U0001F4CE {content.file_name}" + (f" ({size})" if size else "")
        body.append(Text(header, style="bold"))
        if isinstance(content, FileRef) and blob_store is not None:
            body.append(Text(f"{kind}: {blob_store.url_for(content.blob_id)}", style="dim"))
        elif isinstance(content, IndexedDbRef):
            body.append(Text("(no longer downloadable)", style="dim"))

    caption = view.visible_caption
    if caption and not isinstance(content, PlainText):
        body.append(Text(caption))

    return Panel(
        Group(*body),
        title=view.sender_label,
        subtitle=view.timestamp,
        title_align="right" if view.is_own else "left",
        border_style="green" if view.is_own else "blue",
    )
