"""Metric models and registry"""
