"""Warden interfaces: capabilities supplied by the host"""
