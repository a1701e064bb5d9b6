"""VidVault: authenticated media uploads backed by a hosted media service"""
__version__ = "0.1.0"
