# Test configuration package
