"""
AssetPipe recovery package.
"""
