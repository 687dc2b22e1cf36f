#!/usr/bin/env python3
"""Manual script to test a live band search against metal-api.dev."""

from metal_search.api.client import MetalApiClient

if __name__ == "__main__":
    with MetalApiClient() as client:
        for band in client.search_by_band_name("Mayhem"):
            print(band)
