"""Console and Textual front-ends for quiz sessions."""
