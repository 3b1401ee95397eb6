"""
AssetPipe config package.
"""
