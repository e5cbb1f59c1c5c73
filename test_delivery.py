"""
Tests for DeliveryService against a local aiohttp webhook
"""
import shutil
import tempfile
import unittest
from pathlib import Path
from types import MappingProxyType
from unittest.mock import patch

from aiohttp import web
from aiohttp import test_utils

from cliprelay.config import ChannelConfig
from cliprelay.errors import ChannelNotFound
from cliprelay.services import DeliveryService, compose_message


class WebhookServerMixin:
    """Local endpoint that records every multipart post it receives"""

    async def start_webhook(self):
        self.received = []
        app = web.Application()
        app.router.add_post("/hooks/{name}", self._hook)
        app.router.add_post("/broken", self._broken)
        app.router.add_post("/garbled", self._garbled)
        self.server = test_utils.TestServer(app)
        await self.server.start_server()

    async def stop_webhook(self):
        await self.server.close()

    def hook_url(self, path: str) -> str:
        return str(self.server.make_url(path))

    async def _hook(self, request):
        data = await request.post()
        upload = data["file"]
        self.received.append({
            "channel": request.match_info["name"],
            "content": data["content"],
            "filename": upload.filename,
            "file": upload.file.read(),
        })
        return web.json_response({"ok": True})

    async def _broken(self, request):
        await request.read()
        return web.Response(status=500, text="internal error")

    async def _garbled(self, request):
        await request.read()
        return web.Response(status=502, body=b"\xff\xfe\xfa gateway")


class TestComposeMessage(unittest.TestCase):

    def test_username_and_message(self):
        self.assertEqual(compose_message("look", "alice"), "alice shared:\nlook")

    def test_message_only(self):
        self.assertEqual(compose_message("hi", None), "hi")

    def test_username_only(self):
        self.assertEqual(compose_message("", "alice"), "alice shared:")

    def test_nothing(self):
        self.assertEqual(compose_message(None, None), "")


class TestDeliveryService(WebhookServerMixin, unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        await self.start_webhook()
        self.test_dir = Path(tempfile.mkdtemp())
        self.video = self.test_dir / "req-1.mp4"
        self.video.write_bytes(b"\x00\x01video-bytes")
        self.delivery = DeliveryService(MappingProxyType({
            "general": ChannelConfig("general", self.hook_url("/hooks/general")),
            "broken": ChannelConfig("broken", self.hook_url("/broken")),
            "garbled": ChannelConfig("garbled", self.hook_url("/garbled")),
            "offline": ChannelConfig("offline", "http://127.0.0.1:1/hooks/offline"),
        }), timeout=10)

    async def asyncTearDown(self):
        await self.stop_webhook()
        shutil.rmtree(self.test_dir)

    async def test_posts_file_and_content(self):
        delivered = await self.delivery.send(self.video, "general", "hi", "alice")

        self.assertTrue(delivered)
        self.assertEqual(len(self.received), 1)
        post = self.received[0]
        self.assertEqual(post["channel"], "general")
        self.assertEqual(post["content"], "alice shared:\nhi")
        self.assertEqual(post["filename"], "req-1.mp4")
        self.assertEqual(post["file"], b"\x00\x01video-bytes")

    async def test_file_only_post(self):
        self.assertTrue(await self.delivery.send(self.video, "general"))
        self.assertEqual(self.received[0]["content"], "")

    async def test_unknown_channel_raises_before_posting(self):
        with self.assertRaises(ChannelNotFound):
            await self.delivery.send(self.video, "nope", "hi")
        self.assertEqual(self.received, [])

    async def test_endpoint_error_is_logged_not_raised(self):
        with self.assertLogs("cliprelay.services.delivery_service", level="ERROR") as logs:
            delivered = await self.delivery.send(self.video, "broken", "hi")

        self.assertFalse(delivered)
        output = "\n".join(logs.output)
        self.assertIn("DeliveryFailure", output)
        self.assertIn("500", output)

    async def test_undecodable_error_body_is_logged_not_raised(self):
        with self.assertLogs("cliprelay.services.delivery_service", level="ERROR") as logs:
            delivered = await self.delivery.send(self.video, "garbled", "hi")

        self.assertFalse(delivered)
        output = "\n".join(logs.output)
        self.assertIn("DeliveryFailure", output)
        self.assertIn("502", output)
        self.assertIn("gateway", output)

    async def test_video_file_is_closed_after_posting(self):
        opened = []
        real_open = open

        def tracking_open(*args, **kwargs):
            f = real_open(*args, **kwargs)
            opened.append(f)
            return f

        with patch("cliprelay.services.delivery_service.open", side_effect=tracking_open, create=True):
            await self.delivery.send(self.video, "broken", "hi")

        self.assertEqual(len(opened), 1)
        self.assertTrue(opened[0].closed)

    async def test_network_error_is_logged_not_raised(self):
        with self.assertLogs("cliprelay.services.delivery_service", level="ERROR") as logs:
            delivered = await self.delivery.send(self.video, "offline", "hi")

        self.assertFalse(delivered)
        self.assertIn("DeliveryFailure", "\n".join(logs.output))


if __name__ == '__main__':
    unittest.main()
