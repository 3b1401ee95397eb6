"""
AssetPipe utils package.
"""
