from __future__ import annotations

from clawdis.channels.nextcloud_talk import NextcloudTalkClient, NextcloudTalkError

__all__ = ["NextcloudTalkClient", "NextcloudTalkError"]
