"""
Drupal content analysis report generator.
"""
