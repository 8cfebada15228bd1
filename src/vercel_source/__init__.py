"""
vercel-source-downloader: rebuild a Vercel deployment's source tree on disk.
"""
