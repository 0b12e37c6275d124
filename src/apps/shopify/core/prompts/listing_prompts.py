EXAMPLE_TITLE = "Impressionist Floral Wrap Dress - Short Sleeve V-Neck Midi Dress with Tie Belt"

EXAMPLE_DESCRIPTION = """A folk-inspired midi dress featuring warm autumn stripes in orange, brown, and beige with traditional dirndl details including ruffled collar, button-front bodice, and lace-up.

**Key Features:**
- Multi-colored vertical stripes in autumn tones
- Ruffled collar detail
- Button-front closure on bodice
- Lace-up corset-style
- Sleeveless design
- A-line midi skirt
- Traditional folk-inspired construction

**Style:**
- Folk traditional
- Dirndl-inspired
- Vintage European
- Autumn harvest aesthetic

**Occasion:**
- Oktoberfest celebrations
- Fall festivals
- Cultural events
- Harvest gatherings
- Themed parties
- Autumn weddings"""

USER_PROMPT = """
You are a fashion expert tasked with analyzing clothing images and organizing them into structured shopify product listings.

I will provide you with {image_count} clothing images. Your task is to:

1. Analyze all the images and identify distinct products/clothing items
2. Group similar items together (same design, different colors/sizes, etc.)
3. Generate appropriate product titles and descriptions
4. Assign relevant categories
5. Map which image indexes belong to each product

For each product, provide:
- title: A clear, descriptive product name (e.g., "Floral Summer Dress", "Classic Denim Jacket")
- description: A detailed description including style, material hints, occasion, and key features
- imageIndexes: Array of image indexes that show this product, indexes start from 0
- category: One of these categories: {categories}
- hasLongSleeves: boolean, whether the product has long sleeves or not

Guidelines:
- If images show the same item from different angles or in different colors, group them as one product
- Be specific and appealing in titles and descriptions
- Focus on style, fit, occasion, and visual appeal
- Use fashion terminology appropriately
- Ensure every image index is used by exactly one product
- The title and descriptions are for non-native english speakers, keep them simple
- The sequence of images for a product should be full length front picture, slightly zoomed front picture, then back picture.
  Make sure you pick the indexes to match this sequence for every product

- Example Title: `{example_title}`
- Example description:
```
{example_description}
```

Output Format:
{{
  "products": Array<{{
    "title": string;
    "description": string;
    "imageIndexes": number[];
    "category": {category_union};
    "price": number;
    "hasLongSleeves": boolean;
  }}>
}}
Leave "price" at {default_price} unless the images clearly justify another value.
Output as raw parsable JSON with no additional text or formatting.
"""

IMAGE_LABEL_TEMPLATE = "Image {index}:"
