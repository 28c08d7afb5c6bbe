"""Warden core: constants, settings, exceptions and the validation engine"""
