"""Image pipeline: validation, compression, previews and the image list model."""
