# Test factories package
