# Statistics module
