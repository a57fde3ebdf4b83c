#!/usr/bin/env python3
"""
Worker Smoke Check
==================

Exercises a running render worker with a fixed set of requests and checks the
response shape: method gating, payload rejection, and one request per render mode.
Decoded outputs are written next to the script's working directory.

Start the worker first:
    uvicorn pagesnap.api.main:app --port 8787
"""

import argparse
import asyncio
import base64
import io
import sys
from pathlib import Path
from typing import Any, Dict, List

import aiohttp
from PIL import Image

DEFAULT_WORKER_URL = "http://localhost:8787"

PNG_SIGNATURE = b"\x89PNG"
PDF_SIGNATURE = b"%PDF"

TEST_CASES: List[Dict[str, Any]] = [
    {
        "name": "HTML to Image",
        "payload": {
            "html": (
                '<html><body style="font-family: Arial; padding: 20px; '
                'background: linear-gradient(45deg, #ff6b6b, #4ecdc4);">'
                '<h1 style="color: white; text-align: center;">Hello from the render worker!</h1>'
                '<p style="color: white; text-align: center;">This is a test HTML to image conversion</p>'
                "</body></html>"
            ),
            "width": 800,
            "height": 600,
            "qualityFactor": 2,
        },
        "expected_content_type": "image/png",
        "output_file": "test-html-output.png",
    },
    {
        "name": "HTML to Image (Full Page)",
        "payload": {
            "html": (
                '<html><body style="font-family: Arial; padding: 20px;"><h1>Full Page Test</h1>'
                '<div style="height: 2000px; background: linear-gradient(to bottom, red, blue);">'
                "<p>This is a very tall page to test full page capture</p></div></body></html>"
            ),
        },
        "expected_content_type": "image/png",
        "output_file": "test-html-fullpage.png",
    },
    {
        "name": "URL Screenshot",
        "payload": {"url": "https://example.com", "width": 1280},
        "expected_content_type": "image/png",
        "output_file": "test-url-output.png",
    },
    {
        "name": "PDF Generation",
        "payload": {"pdfURL": "https://example.com"},
        "expected_content_type": "application/pdf",
        "output_file": "test-pdf-output.pdf",
    },
]


def describe_output(data: bytes, content_type: str) -> str:
    """Check the leading signature and summarize the decoded output."""
    if content_type == "application/pdf":
        if not data.startswith(PDF_SIGNATURE):
            raise ValueError("decoded body is not a PDF")
        return f"PDF, {len(data)} bytes"

    if not data.startswith(PNG_SIGNATURE):
        raise ValueError("decoded body is not a PNG")
    with Image.open(io.BytesIO(data)) as image:
        width, height = image.size
    return f"PNG {width}x{height}, {len(data)} bytes"


async def run_case(
    session: aiohttp.ClientSession, worker_url: str, case: Dict[str, Any], output_dir: Path
) -> bool:
    print(f"\n🧪 Testing: {case['name']}")

    try:
        async with session.post(worker_url, json=case["payload"]) as response:
            print(f"Status: {response.status}")
            if response.status != 200:
                print(f"❌ Test failed: {await response.text()}")
                return False
            result = await response.json()
    except aiohttp.ClientError as e:
        print(f"❌ Test failed with error: {e}")
        return False

    content_type = result.get("headers", {}).get("Content-Type")
    body = result.get("body") or ""
    print(
        "Response structure:",
        {
            "statusCode": result.get("statusCode"),
            "contentType": content_type,
            "isBase64Encoded": result.get("isBase64Encoded"),
            "bodyLength": len(body),
        },
    )

    if result.get("statusCode") != 200:
        print(f"❌ Wrong status code: {result.get('statusCode')}")
        return False
    if content_type != case["expected_content_type"]:
        print(f"❌ Wrong content type: {content_type}")
        return False
    if result.get("isBase64Encoded") is not True:
        print("❌ Response should be base64 encoded")
        return False
    if not body:
        print("❌ No body in response")
        return False

    try:
        data = base64.b64decode(body)
        summary = describe_output(data, content_type)
        target = output_dir / case["output_file"]
        target.write_bytes(data)
    except (ValueError, OSError) as e:
        print(f"❌ Output check failed: {e}")
        return False

    print(f"✅ File saved: {target} ({summary})")
    return True


async def check_method_not_allowed(session: aiohttp.ClientSession, worker_url: str) -> bool:
    print("\n🧪 Testing GET request (should fail)")
    async with session.get(worker_url) as response:
        print(f"Status: {response.status} Response: {await response.text()}")
        ok = response.status == 405
    print("✅ GET request correctly rejected" if ok else "❌ GET request should return 405")
    return ok


async def check_invalid_payload(session: aiohttp.ClientSession, worker_url: str) -> bool:
    print("\n🧪 Testing invalid payload")
    async with session.post(worker_url, json={"invalid": "payload"}) as response:
        text = await response.text()
        print(f"Status: {response.status} Response: {text}")
        ok = response.status == 400 and text == "No valid payload found"
    print("✅ Invalid payload correctly rejected" if ok else "❌ Invalid payload should return 400")
    return ok


async def main(worker_url: str, output_dir: Path) -> int:
    print("🚀 Starting render worker checks")
    print(f"Testing against: {worker_url}")

    timeout = aiohttp.ClientTimeout(total=120, connect=10)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        try:
            edge_results = [
                await check_method_not_allowed(session, worker_url),
                await check_invalid_payload(session, worker_url),
            ]
        except aiohttp.ClientError as e:
            print(f"❌ Worker not accessible: {e}")
            return 1

        passed = 0
        for case in TEST_CASES:
            if await run_case(session, worker_url, case, output_dir):
                passed += 1
            await asyncio.sleep(1)

    total = len(TEST_CASES)
    print(f"\n📊 Test Results: {passed}/{total} render checks passed")
    if passed == total and all(edge_results):
        print("🎉 All checks passed!")
        return 0
    print("❌ Some checks failed")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-check a running render worker")
    parser.add_argument("--url", default=DEFAULT_WORKER_URL, help="Worker base URL")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Where to save outputs")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.url, args.output_dir)))
