"""Core auction system: assets, auction engine, directory"""
