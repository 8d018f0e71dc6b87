"""Built-in Thai vocabulary shipped with the app.

(id, thai, romanization, english, category, difficulty)
"""

from __future__ import annotations

VOCABULARY: list[tuple[str, str, str, str, str, str]] = [
    ("v1", "สวัสดี", "sa-wat-dee", "Hello / Goodbye", "greetings", "beginner"),
    ("v2", "ขอบคุณ", "khawp-khun", "Thank you", "greetings", "beginner"),
    ("v3", "ไม่เป็นไร", "mai-pen-rai", "No problem / Never mind", "greetings", "beginner"),
    ("v4", "ใช่", "chai", "Yes", "basics", "beginner"),
    ("v5", "ไม่", "mai", "No / Not", "basics", "beginner"),
    ("v6", "ครับ", "khrap", "Polite particle (male)", "basics", "beginner"),
    ("v7", "ค่ะ", "kha", "Polite particle (female)", "basics", "beginner"),
    ("v8", "หนึ่ง", "neung", "One (1)", "numbers", "beginner"),
    ("v9", "สอง", "sawng", "Two (2)", "numbers", "beginner"),
    ("v10", "สาม", "saam", "Three (3)", "numbers", "beginner"),
    ("v11", "สี่", "see", "Four (4)", "numbers", "beginner"),
    ("v12", "ห้า", "haa", "Five (5)", "numbers", "beginner"),
    ("v13", "อร่อย", "a-roi", "Delicious", "food", "beginner"),
    ("v14", "น้ำ", "naam", "Water", "food", "beginner"),
    ("v15", "ข้าว", "khaao", "Rice", "food", "beginner"),
    ("v16", "เผ็ด", "phet", "Spicy", "food", "beginner"),
    ("v17", "ไปไหน", "bpai nai", "Where are you going?", "travel", "beginner"),
    ("v18", "ที่นี่", "thee-nee", "Here", "travel", "beginner"),
    ("v19", "ที่นั่น", "thee-nan", "There", "travel", "beginner"),
    ("v20", "เท่าไหร่", "thao-rai", "How much?", "phrases", "beginner"),
    ("v21", "แพง", "phaeng", "Expensive", "phrases", "beginner"),
    ("v22", "ถูก", "thuuk", "Cheap", "phrases", "beginner"),
    ("v23", "วันนี้", "wan-nee", "Today", "time", "beginner"),
    ("v24", "พรุ่งนี้", "phroong-nee", "Tomorrow", "time", "beginner"),
    ("v25", "เมื่อวาน", "meua-waan", "Yesterday", "time", "beginner"),
    ("v26", "ผม", "phom", "I (male)", "basics", "beginner"),
    ("v27", "ดิฉัน", "di-chan", "I (female, formal)", "basics", "beginner"),
    ("v28", "คุณ", "khun", "You (polite)", "basics", "beginner"),
    ("v29", "รัก", "rak", "Love", "phrases", "intermediate"),
    ("v30", "สบายดี", "sa-bai-dee", "I'm fine / Feeling good", "greetings", "beginner"),
    ("v31", "ร้อน", "rawn", "Hot", "basics", "beginner"),
    ("v32", "เย็น", "yen", "Cold / Cool", "basics", "beginner"),
    ("v33", "สวย", "suay", "Beautiful", "phrases", "beginner"),
    ("v34", "หล่อ", "law", "Handsome", "phrases", "beginner"),
    ("v35", "กิน", "gin", "Eat", "food", "beginner"),
    ("v36", "ดื่ม", "deum", "Drink", "food", "beginner"),
    ("v37", "ช่วยด้วย", "chuay duay", "Help! / Please help", "phrases", "intermediate"),
    ("v38", "โรงพยาบาล", "rohng-pha-yaa-baan", "Hospital", "travel", "intermediate"),
    ("v39", "ตำรวจ", "dtam-ruat", "Police", "travel", "intermediate"),
    ("v40", "สนามบิน", "sa-naam-bin", "Airport", "travel", "intermediate"),
]
