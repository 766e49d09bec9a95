"""Human and machine renderings of ServiceResult."""
