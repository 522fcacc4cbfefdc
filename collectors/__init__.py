"""Resource sources and collectors"""
